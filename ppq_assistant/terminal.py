"""Terminal input and rendering for the snippet selector."""

import os
import sys
from typing import Iterator, Sequence, TextIO

from .preview import SnippetPreview
from .selector import InputEvent, Selector

# For single-keypress reading (Unix only)
try:
    import termios
    import tty
    HAS_TERMIOS = True
except ImportError:
    HAS_TERMIOS = False

RESET = "\033[0m"
BOLD_GREEN = "\033[1;32m"
BOLD_CYAN = "\033[1;36m"
BOLD_YELLOW = "\033[1;33m"
BOLD_RED = "\033[1;31m"
YELLOW = "\033[33m"
CYAN = "\033[36m"
GREY = "\033[90m"

_ARROWS = {"A": "up", "B": "down", "C": "right", "D": "left"}

HELP_LINE = "Press a number key (0-9) to select, or use arrow keys and Enter. Ctrl+C or Esc to abort."


def paint(text: str, style: str, stream: TextIO | None = None) -> str:
    """Wrap text in an ANSI style when stream is a terminal."""
    stream = stream or sys.stdout
    if not stream.isatty():
        return text
    return f"{style}{text}{RESET}"


def read_keypress(stream: TextIO | None = None) -> str | None:
    """
    Read a single keypress without waiting for Enter.

    Returns the character, or one of 'up', 'down', 'left', 'right', 'esc'.
    Returns None when stream (default stdin) is not a terminal.
    """
    stream = stream or sys.stdin
    if not HAS_TERMIOS or not stream.isatty():
        return None
    fd = stream.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        # One read returns a whole escape sequence when an arrow key is pressed
        data = os.read(fd, 8)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
    if not data:
        return 'esc'
    if data[:1] == b'\x1b':
        if len(data) >= 3 and data[1:2] in (b'[', b'O'):
            return _ARROWS.get(chr(data[2]), 'esc')
        return 'esc'
    return data.decode("utf-8", errors="replace")[:1]


def key_to_event(key: str) -> InputEvent | None:
    """Map a keypress to a selector event. Unbound keys map to None."""
    if key in ('up', 'left', 'k', 'h'):
        return InputEvent.up()
    if key in ('down', 'right', 'j', 'l'):
        return InputEvent.down()
    if key in ('\r', '\n', ' '):
        return InputEvent.confirm()
    if key in ('esc', 'q', '\x03', '\x04'):  # Esc, q, Ctrl+C, Ctrl+D
        return InputEvent.interrupt()
    if len(key) == 1 and key.isdigit():
        return InputEvent.digit(int(key))
    return None


def keypress_events(stream: TextIO | None = None) -> Iterator[InputEvent]:
    """Yield selector events from raw keypresses until stream stops being a terminal."""
    while True:
        key = read_keypress(stream)
        if key is None:
            return
        event = key_to_event(key)
        if event is not None:
            yield event


def line_events(prompt: str = "Snippet number (empty to cancel): ") -> Iterator[InputEvent]:
    """Fallback for non-interactive stdin: read one line, accept a number."""
    try:
        answer = input(prompt).strip()
    except EOFError:
        answer = ""
    if answer.isdigit():
        # A full index, not a single keypress: commit it directly
        yield InputEvent.digit(int(answer))
    yield InputEvent.interrupt()


def open_keyboard() -> TextIO | None:
    """
    Terminal to read keypresses from.

    stdin when it is a terminal, else the controlling terminal (/dev/tty), so a
    prompt piped on stdin can still be followed by an interactive selection.
    None when there is no terminal at all. Close it with close_keyboard().
    """
    if not HAS_TERMIOS:
        return None
    if sys.stdin.isatty():
        return sys.stdin
    try:
        return open("/dev/tty", encoding="utf-8")
    except OSError:
        return None


def close_keyboard(keyboard: TextIO | None) -> None:
    if keyboard is not None and keyboard is not sys.stdin:
        keyboard.close()


def input_events(keyboard: TextIO | None = None) -> Iterator[InputEvent]:
    """Keypress events from keyboard, line-based events from stdin without one."""
    if keyboard is not None:
        return keypress_events(keyboard)
    return line_events()


def render_previews(previews: Sequence[SnippetPreview], out: TextIO | None = None) -> None:
    """Print the numbered snippet list with preview lines."""
    out = out or sys.stdout
    print(f"\n{paint('Select a code snippet to execute:', BOLD_GREEN, out)}", file=out)
    for preview in previews:
        label_style = BOLD_YELLOW if preview.supported else GREY
        print(f"{paint(str(preview.index), BOLD_CYAN, out)}: {paint(preview.label, label_style, out)}", file=out)
        for line in preview.lines:
            print(f"   {line}", file=out)
        print(file=out)
    print(HELP_LINE, file=out)


def render_cursor_line(selector: Selector, out: TextIO | None = None) -> None:
    """Redraw the index bar, bracketing the highlighted entry: [0]  1   2 ."""
    out = out or sys.stdout
    parts = []
    for i in range(selector.count):
        if i == selector.cursor:
            parts.append(f"[{paint(str(i), BOLD_GREEN, out)}] ")
        else:
            parts.append(f" {paint(str(i), CYAN, out)}  ")
    out.write("\r" + "".join(parts) + "\r")
    out.flush()
