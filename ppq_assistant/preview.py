"""Display previews for extracted snippets."""

from dataclasses import dataclass

from .constants import PREVIEW_LINES
from .languages import resolve_language
from .snippets import Snippet

ELLIPSIS = "..."
UNTAGGED = "untagged"


@dataclass(frozen=True)
class SnippetPreview:
    """Label plus the leading body lines shown for one snippet."""

    index: int
    label: str
    lines: tuple[str, ...]
    supported: bool = True


def snippet_label(snippet: Snippet) -> str:
    """'<Language> snippet (<n> lines)', using the raw tag when unsupported."""
    strategy = resolve_language(snippet.language_tag)
    if strategy:
        name = strategy.canonical_name
    else:
        name = snippet.language_tag.strip() or UNTAGGED
    return f"{name} snippet ({snippet.line_count} lines)"


def preview_snippet(snippet: Snippet, max_lines: int = PREVIEW_LINES) -> SnippetPreview:
    """Build the preview for a snippet. Never touches snippet.body."""
    body_lines = snippet.body.split("\n") if snippet.body else []
    shown = [line.rstrip() for line in body_lines[:max_lines]]
    truncated = len(body_lines) > max_lines
    if truncated and shown:
        shown[-1] = f"{shown[-1]} {ELLIPSIS}" if shown[-1] else ELLIPSIS
    return SnippetPreview(
        index=snippet.index,
        label=snippet_label(snippet),
        lines=tuple(shown),
        supported=resolve_language(snippet.language_tag) is not None,
    )
