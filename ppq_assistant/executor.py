"""Run a selected snippet with the interpreter its language tag maps to."""

import codecs
import enum
import logging
import os
import selectors
import shutil
import signal
import subprocess
import sys
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, TextIO

from .constants import EXIT_SPAWN_FAILURE, EXIT_UNSUPPORTED, KILL_GRACE_PERIOD
from .languages import ExecutionStrategy, InvocationMode, resolve_language
from .snippets import Snippet

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 4096


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    RUNTIME_FAILURE = "runtime_failure"            # ran, exited non-zero or was signalled
    SPAWN_FAILURE = "spawn_failure"                # interpreter missing or not executable
    UNSUPPORTED_LANGUAGE = "unsupported_language"  # no strategy, nothing spawned


@dataclass
class ExecutionOutcome:
    """Result of executing one snippet."""

    kind: OutcomeKind
    strategy: ExecutionStrategy | None = None
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def started(self) -> bool:
        """True if a process ran and exited (as opposed to never starting)."""
        return self.kind in (OutcomeKind.SUCCESS, OutcomeKind.RUNTIME_FAILURE)

    @property
    def signal(self) -> int | None:
        """Signal number that terminated the process, if any."""
        if self.returncode is not None and self.returncode < 0:
            return -self.returncode
        return None

    @property
    def exit_code(self) -> int:
        """Exit code the CLI should return for this outcome."""
        if self.kind is OutcomeKind.SUCCESS:
            return 0
        if self.kind is OutcomeKind.UNSUPPORTED_LANGUAGE:
            return EXIT_UNSUPPORTED
        if self.kind is OutcomeKind.SPAWN_FAILURE:
            return EXIT_SPAWN_FAILURE
        if self.signal is not None:
            return 128 + self.signal
        return self.returncode or 1

    def describe(self) -> str:
        """One-line human readable summary."""
        if self.kind is OutcomeKind.SUCCESS:
            return "Execution completed successfully."
        if self.kind is OutcomeKind.RUNTIME_FAILURE:
            if self.signal is not None:
                try:
                    name = signal.Signals(self.signal).name
                except ValueError:
                    name = f"signal {self.signal}"
                return f"Execution terminated by {name}."
            return f"Execution failed with status: {self.returncode}"
        return self.error or self.kind.value


@contextmanager
def materialized(strategy: ExecutionStrategy, body: str) -> Iterator[tuple[list[str], bytes | None]]:
    """
    Yield (argv, stdin_bytes) for running body with strategy.

    FILE strategies get a temp file that is removed on exit, whatever happens
    inside the block. STDIN strategies get the encoded body to pipe in.
    """
    text = strategy.materialize(body)
    if strategy.mode is InvocationMode.STDIN:
        yield strategy.command(), text.encode()
        return

    fd, path = tempfile.mkstemp(prefix="ppq-", suffix=strategy.suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        yield strategy.command(path), None
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


class Executor:
    """
    Executes snippets, streaming the child's stdout/stderr as it runs.

    Args:
        stdout: Sink for the child's stdout (default: sys.stdout at call time).
        stderr: Sink for the child's stderr (default: sys.stderr at call time).
        spawn: Process factory with the subprocess.Popen signature.
        resolve: Tag -> strategy lookup.
        kill_grace: Seconds between SIGTERM and SIGKILL when tearing down.
    """

    def __init__(
        self,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        spawn: Callable[..., subprocess.Popen] = subprocess.Popen,
        resolve: Callable[[str], ExecutionStrategy | None] = resolve_language,
        kill_grace: float = KILL_GRACE_PERIOD,
    ):
        self._stdout = stdout
        self._stderr = stderr
        self._spawn = spawn
        self._resolve = resolve
        self.kill_grace = kill_grace

    def execute(self, snippet: Snippet) -> ExecutionOutcome:
        """Run snippet and wait for it. Never spawns for unsupported tags."""
        strategy = self._resolve(snippet.language_tag)
        if strategy is None:
            shown = snippet.language_tag.strip() or "<none>"
            return ExecutionOutcome(
                OutcomeKind.UNSUPPORTED_LANGUAGE,
                error=f"Unsupported language: {shown}",
            )

        if shutil.which(strategy.interpreter) is None:
            return self._spawn_failure(strategy, f"'{strategy.interpreter}' not found in PATH")

        with materialized(strategy, snippet.body) as (argv, stdin_data):
            logger.debug("Running %s snippet: %s", strategy.canonical_name, argv)
            try:
                proc = self._spawn(
                    argv,
                    stdin=subprocess.PIPE if stdin_data is not None else None,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    start_new_session=True,
                    env=strategy.environment(dict(os.environ)),
                )
            except OSError as e:
                return self._spawn_failure(strategy, e.strerror or str(e))

            with self._supervised(proc):
                out, err = self._pump(proc, stdin_data)
                returncode = proc.wait()

        kind = OutcomeKind.SUCCESS if returncode == 0 else OutcomeKind.RUNTIME_FAILURE
        logger.debug("%s snippet exited with %s", strategy.canonical_name, returncode)
        return ExecutionOutcome(kind, strategy=strategy, returncode=returncode, stdout=out, stderr=err)

    def _spawn_failure(self, strategy: ExecutionStrategy, reason: str) -> ExecutionOutcome:
        return ExecutionOutcome(
            OutcomeKind.SPAWN_FAILURE,
            strategy=strategy,
            error=f"Could not start {strategy.canonical_name} interpreter: {reason}",
        )

    @contextmanager
    def _supervised(self, proc: subprocess.Popen) -> Iterator[subprocess.Popen]:
        """Make sure proc and its process group are gone when the block exits."""
        try:
            yield proc
        finally:
            if proc.poll() is None:
                self._terminate(proc)
            for stream in (proc.stdin, proc.stdout, proc.stderr):
                if stream is not None:
                    stream.close()

    def _terminate(self, proc: subprocess.Popen) -> None:
        logger.debug("Terminating process group %d", proc.pid)
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except ProcessLookupError:
            pass
        try:
            proc.wait(timeout=self.kill_grace)
        except subprocess.TimeoutExpired:
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
            proc.wait()

    def _pump(self, proc: subprocess.Popen, stdin_data: bytes | None) -> tuple[str, str]:
        """Copy the child's output to the sinks as it arrives; return captured text."""
        if proc.stdin is not None:
            # A child that exits without reading its input breaks the pipe;
            # its exit status is reported instead
            try:
                proc.stdin.write(stdin_data or b"")
            except BrokenPipeError:
                pass
            try:
                proc.stdin.close()
            except BrokenPipeError:
                pass

        sinks = {
            proc.stdout: self._stdout or sys.stdout,
            proc.stderr: self._stderr or sys.stderr,
        }
        captured: dict = {stream: [] for stream in sinks}
        decoders = {
            stream: codecs.getincrementaldecoder("utf-8")(errors="replace")
            for stream in sinks
        }

        with selectors.DefaultSelector() as sel:
            for stream in sinks:
                sel.register(stream, selectors.EVENT_READ)
            while sel.get_map():
                for key, _ in sel.select():
                    stream = key.fileobj
                    chunk = os.read(key.fd, _CHUNK_SIZE)
                    if chunk:
                        text = decoders[stream].decode(chunk)
                    else:
                        sel.unregister(stream)
                        text = decoders[stream].decode(b"", final=True)
                    if text:
                        captured[stream].append(text)
                        sinks[stream].write(text)
                        sinks[stream].flush()

        return "".join(captured[proc.stdout]), "".join(captured[proc.stderr])
