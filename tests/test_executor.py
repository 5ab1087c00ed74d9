"""Unit tests for snippet execution."""

import io
import os
import shutil
import subprocess
import time
import unittest
from unittest.mock import Mock, patch

from ppq_assistant.executor import ExecutionOutcome, Executor, OutcomeKind, materialized
from ppq_assistant.languages import BASH, PYTHON, ExecutionStrategy, InvocationMode
from ppq_assistant.snippets import Snippet, extract_snippets

HAS_BASH = shutil.which("bash") is not None
HAS_PYTHON3 = shutil.which("python3") is not None


class RecordingSpawn:
    """Popen stand-in that records argv and starts the real process."""

    def __init__(self):
        self.calls = []
        self.processes = []

    def __call__(self, argv, **kwargs):
        self.calls.append(list(argv))
        proc = subprocess.Popen(argv, **kwargs)
        self.processes.append(proc)
        return proc


class TimedSink(io.StringIO):
    """Sink that remembers when each chunk arrived."""

    def __init__(self):
        super().__init__()
        self.arrivals = []

    def write(self, text):
        self.arrivals.append((time.monotonic(), text))
        return super().write(text)

    def arrival_of(self, needle: str) -> float:
        return next(t for t, text in self.arrivals if needle in text)


def bash(body: str, index: int = 0) -> Snippet:
    return Snippet(index=index, language_tag="bash", body=body)


class ExecutorTestCase(unittest.TestCase):
    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.spawn = RecordingSpawn()
        self.executor = Executor(stdout=self.out, stderr=self.err, spawn=self.spawn)


@unittest.skipUnless(HAS_BASH, "bash not installed")
class TestExecuteBash(ExecutorTestCase):
    """Test cases for file-based execution with bash."""

    def test_echo_scenario(self):
        """The first snippet of a two-snippet answer runs and prints hi."""
        text = "Here:\n```bash\necho hi\n```\nand\n```python\nprint(1)\n```"
        snippet = extract_snippets(text)[0]
        outcome = self.executor.execute(snippet)
        self.assertEqual(outcome.kind, OutcomeKind.SUCCESS)
        self.assertEqual(outcome.returncode, 0)
        self.assertEqual(outcome.stdout, "hi\n")
        self.assertEqual(self.out.getvalue(), "hi\n")
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.exit_code, 0)

    def test_stderr_and_exit_status(self):
        """Non-zero exits are runtime failures with the status kept verbatim."""
        outcome = self.executor.execute(bash("echo out\necho oops >&2\nexit 3"))
        self.assertEqual(outcome.kind, OutcomeKind.RUNTIME_FAILURE)
        self.assertTrue(outcome.started)
        self.assertEqual(outcome.returncode, 3)
        self.assertEqual(outcome.exit_code, 3)
        self.assertEqual(outcome.stdout, "out\n")
        self.assertEqual(outcome.stderr, "oops\n")
        self.assertEqual(self.err.getvalue(), "oops\n")
        self.assertIn("3", outcome.describe())

    def test_terminated_by_signal(self):
        outcome = self.executor.execute(bash("kill -TERM $$"))
        self.assertEqual(outcome.kind, OutcomeKind.RUNTIME_FAILURE)
        self.assertEqual(outcome.signal, 15)
        self.assertEqual(outcome.exit_code, 143)
        self.assertIn("SIGTERM", outcome.describe())

    def test_temp_file_removed(self):
        self.executor.execute(bash("echo $0"))
        path = self.spawn.calls[0][-1]
        self.assertEqual(self.out.getvalue().strip(), path)
        self.assertFalse(os.path.exists(path))

    def test_temp_file_removed_after_failure(self):
        self.executor.execute(bash("exit 1"))
        self.assertFalse(os.path.exists(self.spawn.calls[0][-1]))

    def test_empty_snippet_runs(self):
        outcome = self.executor.execute(bash(""))
        self.assertEqual(outcome.kind, OutcomeKind.SUCCESS)
        self.assertEqual(outcome.stdout, "")

    def test_interrupt_kills_child(self):
        """An interrupt while streaming tears down the child and removes the temp file."""
        with patch.object(Executor, "_pump", side_effect=KeyboardInterrupt):
            with self.assertRaises(KeyboardInterrupt):
                self.executor.execute(bash("sleep 30"))
        proc = self.spawn.processes[0]
        self.assertIsNotNone(proc.poll())
        self.assertFalse(os.path.exists(self.spawn.calls[0][-1]))

    def test_child_runs_in_own_session(self):
        spawn = Mock(side_effect=lambda argv, **kw: subprocess.Popen(argv, **kw))
        Executor(stdout=self.out, stderr=self.err, spawn=spawn).execute(bash("true"))
        self.assertTrue(spawn.call_args.kwargs["start_new_session"])


@unittest.skipUnless(HAS_PYTHON3, "python3 not installed")
class TestExecutePython(ExecutorTestCase):
    """Test cases for stdin-based execution with python3."""

    def test_print(self):
        outcome = self.executor.execute(Snippet(index=1, language_tag="python", body="print(1)"))
        self.assertEqual(outcome.kind, OutcomeKind.SUCCESS)
        self.assertEqual(outcome.stdout, "1\n")
        self.assertEqual(self.spawn.calls[0], ["python3", "-"])

    def test_exception_is_runtime_failure(self):
        outcome = self.executor.execute(Snippet(index=0, language_tag="py", body="raise SystemExit(4)"))
        self.assertEqual(outcome.kind, OutcomeKind.RUNTIME_FAILURE)
        self.assertEqual(outcome.returncode, 4)

    def test_output_streams_before_exit(self):
        """Lines reach the sink as they are printed, not when the child exits."""
        sink = TimedSink()
        executor = Executor(stdout=sink, stderr=self.err, spawn=self.spawn)
        body = "import time\nprint('first')\ntime.sleep(1)\nprint('second')"
        env = {k: v for k, v in os.environ.items() if k != "PYTHONUNBUFFERED"}
        with patch.dict(os.environ, env, clear=True):
            outcome = executor.execute(Snippet(index=0, language_tag="python", body=body))
        self.assertEqual(outcome.stdout, "first\nsecond\n")
        self.assertGreater(sink.arrival_of("second") - sink.arrival_of("first"), 0.5)

    def test_child_environment_unbuffered(self):
        spawn = Mock(side_effect=lambda argv, **kw: subprocess.Popen(argv, **kw))
        Executor(stdout=self.out, stderr=self.err, spawn=spawn).execute(
            Snippet(index=0, language_tag="python", body="pass")
        )
        self.assertEqual(spawn.call_args.kwargs["env"]["PYTHONUNBUFFERED"], "1")


class TestExecuteWithoutProcess(unittest.TestCase):
    """Outcomes that must never start a process."""

    def test_unsupported_language_never_spawns(self):
        spawn = Mock()
        executor = Executor(spawn=spawn)
        outcome = executor.execute(Snippet(index=0, language_tag="cobol", body="DISPLAY 'HI'."))
        spawn.assert_not_called()
        self.assertEqual(outcome.kind, OutcomeKind.UNSUPPORTED_LANGUAGE)
        self.assertFalse(outcome.started)
        self.assertIn("cobol", outcome.error)
        self.assertNotEqual(outcome.exit_code, 0)

    def test_untagged_never_spawns(self):
        spawn = Mock()
        outcome = Executor(spawn=spawn).execute(Snippet(index=0, language_tag="", body="ls"))
        spawn.assert_not_called()
        self.assertEqual(outcome.kind, OutcomeKind.UNSUPPORTED_LANGUAGE)

    def test_missing_interpreter_is_spawn_failure(self):
        strategy = ExecutionStrategy(
            canonical_name="Ghost",
            interpreter="ppq-no-such-interpreter",
            mode=InvocationMode.FILE,
            tags=("ghost",),
        )
        spawn = Mock()
        executor = Executor(spawn=spawn, resolve=lambda tag: strategy)
        outcome = executor.execute(Snippet(index=0, language_tag="ghost", body="boo"))
        spawn.assert_not_called()
        self.assertEqual(outcome.kind, OutcomeKind.SPAWN_FAILURE)
        self.assertFalse(outcome.started)
        self.assertEqual(outcome.exit_code, 127)
        self.assertIn("ppq-no-such-interpreter", outcome.error)

    @unittest.skipUnless(HAS_BASH, "bash not installed")
    def test_spawn_oserror_is_spawn_failure(self):
        """A Popen failure is reported as spawn failure and the temp file is removed."""
        spawn = Mock(side_effect=PermissionError(13, "Permission denied"))
        outcome = Executor(spawn=spawn).execute(bash("echo hi"))
        self.assertEqual(outcome.kind, OutcomeKind.SPAWN_FAILURE)
        self.assertIn("Permission denied", outcome.error)
        path = spawn.call_args[0][0][-1]
        self.assertFalse(os.path.exists(path))


class TestMaterialized(unittest.TestCase):
    """Test cases for the materialized context manager."""

    def test_file_mode_writes_and_removes(self):
        with materialized(BASH, "echo hi") as (argv, stdin_data):
            path = argv[-1]
            self.assertIsNone(stdin_data)
            self.assertTrue(path.endswith(".sh"))
            with open(path) as f:
                self.assertEqual(f.read(), "echo hi\n")
        self.assertFalse(os.path.exists(path))

    def test_file_removed_on_error(self):
        with self.assertRaises(RuntimeError):
            with materialized(BASH, "echo hi") as (argv, _):
                path = argv[-1]
                raise RuntimeError("boom")
        self.assertFalse(os.path.exists(path))

    def test_stdin_mode(self):
        with materialized(PYTHON, "print(1)") as (argv, stdin_data):
            self.assertEqual(argv, ["python3", "-"])
            self.assertEqual(stdin_data, b"print(1)\n")


class TestExecutionOutcome(unittest.TestCase):
    """Test cases for outcome exit codes."""

    def test_exit_codes(self):
        self.assertEqual(ExecutionOutcome(OutcomeKind.SUCCESS, returncode=0).exit_code, 0)
        self.assertEqual(ExecutionOutcome(OutcomeKind.RUNTIME_FAILURE, returncode=5).exit_code, 5)
        self.assertEqual(ExecutionOutcome(OutcomeKind.RUNTIME_FAILURE, returncode=-9).exit_code, 137)
        self.assertEqual(ExecutionOutcome(OutcomeKind.SPAWN_FAILURE).exit_code, 127)
        self.assertEqual(ExecutionOutcome(OutcomeKind.UNSUPPORTED_LANGUAGE).exit_code, 2)


if __name__ == "__main__":
    unittest.main()
