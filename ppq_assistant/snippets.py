"""Extract fenced code blocks from model response text."""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FENCE = "```"


@dataclass(frozen=True)
class Snippet:
    """One fenced code block found in a response."""

    index: int
    language_tag: str
    body: str

    @property
    def line_count(self) -> int:
        """Number of newline-delimited lines in the body (0 for an empty body)."""
        if not self.body:
            return 0
        return len(self.body.split("\n"))


def _opening_tag(line: str) -> str | None:
    """Return the language tag if line opens a fence, else None."""
    stripped = line.strip()
    if not stripped.startswith(FENCE):
        return None
    rest = stripped[len(FENCE):].strip()
    if rest.startswith("`"):
        # Longer backtick runs (````) are not fences we understand
        return None
    # ```python title="x.py" -> "python"
    return rest.split()[0] if rest else ""


def _is_closing(line: str) -> bool:
    return line.strip() == FENCE


def extract_snippets(text: str) -> list[Snippet]:
    """
    Extract every complete fenced code block from text, in document order.

    A block opens on a line starting with ``` (optionally followed by a
    language tag) and closes on the next line that is exactly ```. Fences
    do not nest: while a block is open, any other fence line is body text.
    A block still open when the text ends is dropped.

    Returns:
        List of Snippet with index values 0..N-1. Empty if nothing was found.
    """
    snippets: list[Snippet] = []
    tag: str | None = None
    body: list[str] = []
    opened_at = 0

    lines = text.replace("\r\n", "\n").split("\n")
    for lineno, line in enumerate(lines, start=1):
        if tag is None:
            tag = _opening_tag(line)
            if tag is not None:
                body = []
                opened_at = lineno
            continue

        if _is_closing(line):
            snippets.append(Snippet(index=len(snippets), language_tag=tag, body="\n".join(body)))
            tag = None
        else:
            body.append(line)

    if tag is not None:
        logger.warning(
            "Discarding unterminated %s code block opened at line %d",
            tag or "untagged", opened_at,
        )

    logger.debug("Extracted %d snippet(s)", len(snippets))
    return snippets
