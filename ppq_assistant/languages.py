"""Language tag to execution strategy registry."""

import enum
from dataclasses import dataclass

from .exceptions import UnsupportedLanguageError


class InvocationMode(enum.Enum):
    """How a snippet body is handed to its interpreter."""

    FILE = "file"    # write body to a temp file, pass its path as last argument
    STDIN = "stdin"  # pipe body to the interpreter's standard input


@dataclass(frozen=True)
class ExecutionStrategy:
    """How to run a snippet of one language."""

    canonical_name: str
    interpreter: str
    mode: InvocationMode
    tags: tuple[str, ...]
    flags: tuple[str, ...] = ()
    suffix: str = ""
    header: str | None = None  # prepended to the file if the body lacks it
    env: tuple[tuple[str, str], ...] = ()  # set on top of the inherited environment

    def command(self, path: str | None = None) -> list[str]:
        """Build the argv for this strategy; path is required for FILE mode."""
        cmd = [self.interpreter, *self.flags]
        if self.mode is InvocationMode.FILE:
            if path is None:
                raise ValueError(f"{self.canonical_name} runs from a file; path required")
            cmd.append(path)
        return cmd

    def materialize(self, body: str) -> str:
        """Return the text to write or pipe for this body."""
        text = body if body.endswith("\n") or not body else body + "\n"
        if self.header and not body.lstrip().startswith(self.header.strip()):
            text = self.header + text
        return text

    def environment(self, base: dict[str, str]) -> dict[str, str] | None:
        """Environment for the child, or None to inherit base unchanged."""
        if not self.env:
            return None
        return {**base, **dict(self.env)}


BASH = ExecutionStrategy(
    canonical_name="Bash",
    interpreter="bash",
    mode=InvocationMode.FILE,
    tags=("bash", "sh", "shell"),
    suffix=".sh",
)
PYTHON = ExecutionStrategy(
    canonical_name="Python",
    interpreter="python3",
    mode=InvocationMode.STDIN,
    tags=("python", "python3", "py"),
    flags=("-",),
    env=(("PYTHONUNBUFFERED", "1"),),
)
JAVASCRIPT = ExecutionStrategy(
    canonical_name="JavaScript",
    interpreter="node",
    mode=InvocationMode.FILE,
    tags=("javascript", "js", "node"),
    suffix=".js",
)
RUBY = ExecutionStrategy(
    canonical_name="Ruby",
    interpreter="ruby",
    mode=InvocationMode.FILE,
    tags=("ruby", "rb"),
    suffix=".rb",
    header="$stdout.sync = true\n",
)
PERL = ExecutionStrategy(
    canonical_name="Perl",
    interpreter="perl",
    mode=InvocationMode.FILE,
    tags=("perl", "pl"),
    suffix=".pl",
    header="$| = 1;\n",
)
PHP = ExecutionStrategy(
    canonical_name="PHP",
    interpreter="php",
    mode=InvocationMode.FILE,
    tags=("php",),
    suffix=".php",
    header="<?php\n",
)

STRATEGIES = (BASH, PYTHON, JAVASCRIPT, RUBY, PERL, PHP)


def _build_registry(strategies: tuple[ExecutionStrategy, ...]) -> dict[str, ExecutionStrategy]:
    registry: dict[str, ExecutionStrategy] = {}
    for strategy in strategies:
        for tag in strategy.tags:
            if tag in registry:
                raise ValueError(f"Tag '{tag}' registered twice")
            registry[tag] = strategy
    return registry


# Normalized tag -> strategy
LANGUAGES: dict[str, ExecutionStrategy] = _build_registry(STRATEGIES)


def normalize_tag(tag: str) -> str:
    """Lower-case and trim a fence tag for lookup."""
    return tag.strip().lower()


def resolve_language(tag: str) -> ExecutionStrategy | None:
    """Resolve a fence tag to its strategy, or None when unsupported or empty."""
    key = normalize_tag(tag)
    if not key:
        return None
    return LANGUAGES.get(key)


def require_language(tag: str) -> ExecutionStrategy:
    """Like resolve_language, but raise UnsupportedLanguageError when not found."""
    strategy = resolve_language(tag)
    if strategy is None:
        raise UnsupportedLanguageError(tag)
    return strategy


def supported_tags() -> list[str]:
    """All accepted tags, sorted."""
    return sorted(LANGUAGES)
