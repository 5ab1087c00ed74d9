"""CLI entry point for ppq-assistant."""

import argparse
import logging
import signal
import sys

from .client import AssistantClient
from .constants import AVAILABLE_MODELS, EXIT_ERROR, EXIT_INTERRUPTED, EXIT_OK
from .exceptions import AssistantError
from .executor import ExecutionOutcome, OutcomeKind
from .languages import resolve_language
from .selector import SelectionResult, SelectionStatus
from .snippets import Snippet
from .terminal import (
    BOLD_GREEN,
    BOLD_RED,
    YELLOW,
    close_keyboard,
    input_events,
    open_keyboard,
    paint,
    render_cursor_line,
    render_previews,
)

logger = logging.getLogger(__name__)


def die(msg: str, hint: str | None = None, code: int = EXIT_ERROR) -> None:
    """Print error message to stderr and exit."""
    print(f"Error: {msg}", file=sys.stderr)
    if hint:
        print(f"Tip: {hint}", file=sys.stderr)
    sys.exit(code)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    epilog = """
examples:
  ppq "list the 5 largest files in this directory"
  ppq --model gpt-4o "print a fibonacci sequence in python"
  echo "show disk usage" | ppq
"""
    parser = argparse.ArgumentParser(
        prog="ppq",
        description="Ask a model for code, pick a snippet from the answer, run it.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    parser.add_argument(
        "--model", "-m",
        choices=AVAILABLE_MODELS,
        metavar="MODEL",
        help=f"Model to use (default: from config). One of: {', '.join(AVAILABLE_MODELS)}",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    parser.add_argument("prompt", nargs="*", help="Prompt text (or pipe it on stdin)")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def read_prompt(words: list[str]) -> str:
    """Join prompt words; fall back to piped stdin."""
    prompt = " ".join(words).strip()
    if not prompt and not sys.stdin.isatty():
        prompt = sys.stdin.read().strip()
    return prompt


def choose_snippet(client: AssistantClient, snippets: list[Snippet]) -> SelectionResult:
    """Show previews and let the user pick one snippet."""
    render_previews(client.previews(snippets))
    keyboard = open_keyboard()
    interactive = keyboard is not None and sys.stdout.isatty()
    on_change = render_cursor_line if interactive else None
    try:
        result = client.select(snippets, input_events(keyboard), on_change)
    finally:
        close_keyboard(keyboard)
    if interactive:
        print()
    return result


def report_outcome(outcome: ExecutionOutcome) -> int:
    """Print the outcome summary and return the exit code for it."""
    if outcome.ok:
        print(f"\n{paint(outcome.describe(), BOLD_GREEN)}\n")
    elif outcome.kind is OutcomeKind.RUNTIME_FAILURE:
        print(f"\n{paint(outcome.describe(), BOLD_RED)}\n")
    else:
        print(f"Error: {outcome.describe()}", file=sys.stderr)
    return outcome.exit_code


def _raise_on_signal(signum, frame) -> None:
    # Unwind through the executor's cleanup so the child group is killed too
    raise SystemExit(128 + signum)


def install_signal_handlers() -> None:
    """Turn SIGTERM and SIGHUP (terminal closed) into SystemExit."""
    for signum in (signal.SIGTERM, signal.SIGHUP):
        signal.signal(signum, _raise_on_signal)


def run(argv: list[str], client: AssistantClient | None = None) -> int:
    """Run one prompt -> select -> execute cycle. Returns the exit code."""
    parser = create_parser()
    args = parser.parse_intermixed_args(argv)
    configure_logging(args.verbose)

    prompt = read_prompt(args.prompt)
    if not prompt:
        die("No prompt provided", hint="Usage: ppq [--model MODEL] <prompt>")

    client = client or AssistantClient()

    try:
        response = client.ask(prompt, args.model)
        print(response)

        snippets = client.extract(response)
        if not snippets:
            print(f"\n{paint('No executable code snippets found.', YELLOW)}")
            return EXIT_OK

        result = choose_snippet(client, snippets)
        if result.status is SelectionStatus.CANCELLED:
            print("Cancelled.")
            return EXIT_OK
        if result.status is SelectionStatus.EMPTY or result.index is None:
            return EXIT_OK

        snippet = snippets[result.index]
        logger.debug("Selected snippet %d (%r)", snippet.index, snippet.language_tag)
        strategy = resolve_language(snippet.language_tag)
        if strategy:
            print(f"\n{paint(f'Executing {strategy.canonical_name} snippet...', BOLD_GREEN)}\n")
        return report_outcome(client.execute(snippet))
    except AssistantError as e:
        die(e.message, e.hint)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    return EXIT_ERROR


def main() -> None:
    """Main CLI entry point."""
    install_signal_handlers()
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
