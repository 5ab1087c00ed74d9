"""
ppq-assistant - ask a model for code, pick a snippet, run it.

Sends a prompt to the PPQ chat completions API, extracts the fenced code
blocks from the answer, lets you choose one and runs it with the matching
interpreter (bash, python3, node, ruby, perl, php).

Library usage:
    from ppq_assistant import AssistantClient, InputEvent

    client = AssistantClient()
    snippets = client.extract(client.ask("Print hello world in bash"))
    result = client.select(snippets, [InputEvent.confirm()])
    if result.committed:
        outcome = client.execute(snippets[result.index])

CLI usage:
    ppq "prompt"                  # Use default model from config
    ppq --model gpt-4o "prompt"   # Pick a model
    echo "prompt" | ppq           # Stdin input
"""

from pathlib import Path

from dotenv import load_dotenv


def _load_dotenv() -> None:
    """Load .env file from package directory or current working directory."""
    pkg_dir = Path(__file__).resolve().parent.parent
    env_locations = [
        pkg_dir / ".env",           # Next to ppq_assistant package
        Path.cwd() / ".env",        # Current working directory
    ]

    for env_file in env_locations:
        if env_file.exists():
            load_dotenv(env_file)
            break  # Stop after first .env found


# Load .env on import so library users get PPQ_* variables loaded
_load_dotenv()

from .client import AssistantClient
from .config import Config, load_config
from .exceptions import (
    ApiError,
    AssistantError,
    ConfigError,
    SelectorError,
    UnsupportedLanguageError,
)
from .executor import ExecutionOutcome, Executor, OutcomeKind
from .languages import ExecutionStrategy, InvocationMode, require_language, resolve_language
from .preview import SnippetPreview, preview_snippet
from .selector import InputEvent, SelectionResult, SelectionStatus, Selector, select
from .snippets import Snippet, extract_snippets

__version__ = "0.1.0"

__all__ = [
    # Main interface
    "AssistantClient",
    # Pipeline
    "Snippet",
    "extract_snippets",
    "ExecutionStrategy",
    "InvocationMode",
    "resolve_language",
    "require_language",
    "SnippetPreview",
    "preview_snippet",
    "InputEvent",
    "Selector",
    "SelectionResult",
    "SelectionStatus",
    "select",
    "Executor",
    "ExecutionOutcome",
    "OutcomeKind",
    # Configuration
    "Config",
    "load_config",
    # Exceptions
    "AssistantError",
    "ApiError",
    "ConfigError",
    "SelectorError",
    "UnsupportedLanguageError",
    # Version
    "__version__",
]
