"""
Command execution. The only place nix-query starts subprocesses.

Callers depend on the :class:`CommandRunner` protocol, so tests can hand
in a runner that returns canned ``nix-env`` output instead of starting a
real process.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from nix_query.exceptions import (
    CommandEncodingError,
    CommandExitError,
    CommandInvocationError,
    CommandStderrError,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class CommandRunner(Protocol):
    """
    Run ``command`` with ``args`` and return its captured stdout.

    Implementations raise a :class:`~nix_query.exceptions.CommandError`
    subclass on any failure. Non-empty stderr counts as a failure even
    when the exit status is zero.

    With ``interactive=True`` stderr stays attached to the terminal, for
    programs like fzf that draw their interface there, and is never
    inspected.
    """

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        stdin: bytes | None = None,
        interactive: bool = False,
    ) -> bytes:
        ...


class SubprocessRunner:
    """Blocking :class:`CommandRunner` backed by :func:`subprocess.run`."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        stdin: bytes | None = None,
        interactive: bool = False,
    ) -> bytes:
        argv = [command, *args]
        logger.debug(f"[PROC] Running {' '.join(argv)}")

        stderr_target = None if interactive else subprocess.PIPE
        try:
            result = subprocess.run(
                argv, input=stdin, stdout=subprocess.PIPE, stderr=stderr_target, check=False
            )
        except OSError as e:
            raise CommandInvocationError(
                f"Could not run `{command}`: {e}",
                command=command,
                args=args,
                hint=f"Is `{command}` installed and on PATH?",
            ) from e

        if result.returncode != 0:
            raise CommandExitError(
                command=command,
                args=args,
                returncode=result.returncode,
                stderr=(result.stderr or b"").decode("utf-8", errors="replace"),
            )

        if result.stderr:
            stderr = decode_output(result.stderr, command, args, stream="stderr")
            raise CommandStderrError(command=command, args=args, stderr=stderr)

        logger.debug(f"[PROC] {command} wrote {len(result.stdout)} bytes")
        return result.stdout


def run_stdout(runner: CommandRunner, command: str, args: Sequence[str]) -> str:
    """Run a command and return its stdout decoded as UTF-8."""
    return decode_output(runner.run(command, args), command, args, stream="stdout")


def decode_output(data: bytes, command: str, args: Sequence[str], *, stream: str = "stdout") -> str:
    """Decode captured output as UTF-8, raising :class:`CommandEncodingError`."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CommandEncodingError(
            f"`{command}` wrote invalid UTF-8 to {stream}: {e}",
            command=command,
            args=args,
        ) from e
