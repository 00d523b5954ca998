"""
Exception hierarchy for nix-query.

Every failure that crosses a layer boundary is one of these, so the CLI
error boundary can render a clean message (plus an optional hint)
instead of a stack trace.

NixQueryError
├── CacheError
│   ├── CacheUnavailableError
│   └── CacheIOError
├── CommandError
│   ├── CommandExitError
│   ├── CommandStderrError
│   ├── CommandEncodingError
│   └── CommandInvocationError
├── MetadataDecodeError
├── EmptyResultError
└── SourcePositionParseError
"""

from __future__ import annotations

from collections.abc import Sequence

# Decode errors echo the offending JSON back to the user; nix-env output
# for a single attribute is small, but keep the hint readable.
MAX_ECHOED_TEXT = 2000


class NixQueryError(Exception):
    """Base exception for all nix-query errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint


# --- Cache -----------------------------------------------------------------


class CacheError(NixQueryError):
    """Raised when the attribute cache cannot be used."""


class CacheUnavailableError(CacheError):
    """Raised when no cache directory can be resolved for this platform."""


class CacheIOError(CacheError):
    """Raised when the cache file cannot be created, read, written or removed."""


# --- External commands -----------------------------------------------------


class CommandError(NixQueryError):
    """Raised when an external command (``nix-env``, ``fzf``) fails."""

    def __init__(
        self,
        message: str,
        *,
        command: str,
        args: Sequence[str] = (),
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.command = command
        self.args_list = list(args)

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.args_list])


class CommandExitError(CommandError):
    """The command exited with a non-zero status."""

    def __init__(
        self,
        *,
        command: str,
        args: Sequence[str],
        returncode: int,
        stderr: str = "",
    ) -> None:
        super().__init__(
            f"`{command}` exited with status {returncode}",
            command=command,
            args=args,
            hint=stderr.strip() or None,
        )
        self.returncode = returncode
        self.stderr = stderr


class CommandStderrError(CommandError):
    """The command wrote to stderr; ``nix-env`` only does that on failure."""

    def __init__(self, *, command: str, args: Sequence[str], stderr: str) -> None:
        super().__init__(
            f"`{command}` reported an error",
            command=command,
            args=args,
            hint=stderr.strip(),
        )
        self.stderr = stderr


class CommandEncodingError(CommandError):
    """The command produced output that is not valid UTF-8."""


class CommandInvocationError(CommandError):
    """The command could not be started at all."""


# --- Metadata --------------------------------------------------------------


class MetadataDecodeError(NixQueryError):
    """
    Raised when ``nix-env`` JSON output does not match any known shape.

    Carries the schema violation and the original text so upstream schema
    drift can be diagnosed without reading the source.
    """

    def __init__(self, description: str, text: str) -> None:
        echoed = text if len(text) <= MAX_ECHOED_TEXT else text[:MAX_ECHOED_TEXT] + "…"
        super().__init__(
            f"Could not decode nix-env output: {description}",
            hint=f"Offending output:\n{echoed}",
        )
        self.description = description
        self.text = text


class EmptyResultError(NixQueryError):
    """Raised when a single-attribute query returns well-formed but empty JSON."""

    def __init__(self, attr: str) -> None:
        super().__init__(
            f"nix-env returned no package for attribute {attr!r}",
            hint="Check the attribute path, e.g. `nixpkgs.gzip`.",
        )
        self.attr = attr


class SourcePositionParseError(NixQueryError):
    """Raised when a ``path:line`` source position cannot be parsed."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Source position must look like 'path:line', got {value!r}")
        self.value = value
