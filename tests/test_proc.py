"""Tests for command execution, using the running Python as the external tool."""

import sys

import pytest

from conftest import FakeRunner
from nix_query.core.proc import CommandRunner, SubprocessRunner, run_stdout
from nix_query.exceptions import (
    CommandEncodingError,
    CommandExitError,
    CommandInvocationError,
    CommandStderrError,
)


def _python(code: str) -> list[str]:
    return ["-c", code]


@pytest.fixture
def runner():
    return SubprocessRunner()


class TestSubprocessRunner:
    def test_is_command_runner(self, runner):
        assert isinstance(runner, CommandRunner)
        assert isinstance(FakeRunner(), CommandRunner)

    def test_stdout(self, runner):
        out = runner.run(sys.executable, _python("import sys; sys.stdout.write('hello')"))
        assert out == b"hello"

    def test_stdin(self, runner):
        code = "import sys; sys.stdout.write(sys.stdin.read().upper())"
        assert runner.run(sys.executable, _python(code), stdin=b"abc") == b"ABC"

    def test_non_zero_exit(self, runner):
        code = "import sys; sys.stderr.write('boom'); sys.exit(3)"
        with pytest.raises(CommandExitError) as exc:
            runner.run(sys.executable, _python(code))
        assert exc.value.returncode == 3
        assert exc.value.stderr == "boom"
        assert exc.value.hint == "boom"
        assert exc.value.command == sys.executable

    def test_stderr_with_zero_exit_is_failure(self, runner):
        code = "import sys; sys.stdout.write('{}'); sys.stderr.write('warning: x')"
        with pytest.raises(CommandStderrError) as exc:
            runner.run(sys.executable, _python(code))
        assert exc.value.stderr == "warning: x"

    def test_missing_executable(self, runner):
        with pytest.raises(CommandInvocationError) as exc:
            runner.run("definitely-not-a-real-command-7f3a", ["--help"])
        assert "definitely-not-a-real-command-7f3a" in exc.value.hint


class TestRunStdout:
    def test_decodes_utf8(self):
        runner = FakeRunner(default="ünïcödé".encode("utf-8"))
        assert run_stdout(runner, "nix-env", ["-q"]) == "ünïcödé"

    def test_invalid_utf8(self):
        runner = FakeRunner(default=b"\xff\xfe")
        with pytest.raises(CommandEncodingError) as exc:
            run_stdout(runner, "nix-env", ["-q"])
        assert exc.value.command_line == "nix-env -q"


class TestInteractive:
    def test_stderr_left_on_terminal(self, runner):
        code = "import sys; sys.stderr.write('\\x1b[2J> '); sys.stdout.write('picked')"
        assert runner.run(sys.executable, _python(code), interactive=True) == b"picked"

    def test_exit_status_still_checked(self, runner):
        code = "import sys; sys.stderr.write('drawn'); sys.exit(130)"
        with pytest.raises(CommandExitError) as exc:
            runner.run(sys.executable, _python(code), interactive=True)
        assert exc.value.returncode == 130
        assert exc.value.stderr == ""
