"""Main client interface for ppq-assistant library usage."""

from pathlib import Path
from typing import Callable, Iterable

from .config import Config, load_config
from .executor import ExecutionOutcome, Executor
from .preview import SnippetPreview, preview_snippet
from .providers import PPQProvider, Provider
from .selector import InputEvent, SelectionResult, Selector, select
from .snippets import Snippet, extract_snippets


class AssistantClient:
    """
    Main interface for using ppq-assistant as a library.

    Example usage:
        from ppq_assistant import AssistantClient, InputEvent

        client = AssistantClient()
        text = client.ask("Print the current date in bash")
        snippets = client.extract(text)
        result = client.select(snippets, [InputEvent.digit(0)])
        if result.committed:
            outcome = client.execute(snippets[result.index])
            print(outcome.exit_code)
    """

    def __init__(
        self,
        config: Config | None = None,
        config_path: str | Path | None = None,
        provider: Provider | None = None,
        executor: Executor | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Ready-made configuration. If None, loaded lazily from disk.
            config_path: Optional path to config file. If None, uses default location.
            provider: Chat completion backend. Defaults to PPQProvider built from config.
            executor: Snippet executor. Defaults to one streaming to stdout/stderr.
        """
        self._config = config
        self._config_path = Path(config_path) if config_path else None
        self._provider = provider
        self.executor = executor or Executor()

    @property
    def config(self) -> Config:
        """Lazy-load configuration."""
        if self._config is None:
            self._config = load_config(self._config_path)
        return self._config

    @property
    def provider(self) -> Provider:
        """Provider built from configuration on first use."""
        if self._provider is None:
            self.config.validate()
            self._provider = PPQProvider(self.config.api_token, self.config.api_url)
        return self._provider

    def ask(self, prompt: str, model: str | None = None) -> str:
        """
        Send a prompt and return the raw response text.

        Args:
            prompt: The prompt to send
            model: Model identifier. Defaults to the configured default model.

        Raises:
            ConfigError: If no API token is configured
            ApiError: If the request fails
        """
        return self.provider.call(model or self.config.default_model, prompt)

    def extract(self, text: str) -> list[Snippet]:
        """Extract fenced code blocks from response text."""
        return extract_snippets(text)

    def previews(self, snippets: Iterable[Snippet]) -> list[SnippetPreview]:
        """Build display previews for snippets."""
        return [preview_snippet(s) for s in snippets]

    def select(
        self,
        snippets: list[Snippet],
        events: Iterable[InputEvent],
        on_change: Callable[[Selector], None] | None = None,
    ) -> SelectionResult:
        """Resolve a sequence of input events to a selection over snippets."""
        return select(snippets, events, on_change)

    def execute(self, snippet: Snippet) -> ExecutionOutcome:
        """Execute a snippet with the interpreter for its language."""
        return self.executor.execute(snippet)
