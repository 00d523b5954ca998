"""
fzf front end for the cached attribute listing.

fzf draws its interface on the terminal directly and prints the chosen
lines on stdout, so it goes through the same command runner as nix-env.
The preview pane calls back into nix-query to render the highlighted
attribute.
"""

import logging
import os
import shlex
import sys

from nix_query.core.proc import CommandRunner, decode_output
from nix_query.exceptions import CommandExitError
from nix_query.parsers.nix_env import FIELD_DELIMITER, attr_path_of

logger = logging.getLogger(__name__)

# fzf exits 1 when nothing matched and 130 when the user backed out.
NO_SELECTION_EXIT_CODES = (1, 130)


def self_command() -> str:
    """How the preview pane should invoke this program."""
    exe = sys.argv[0] if sys.argv and sys.argv[0] else ""
    if exe.endswith(".py"):
        # Started as ``python -m nix_query.cli.main``; the module file is not executable.
        return f"{shlex.quote(sys.executable)} -m nix_query.cli.main"
    if exe and os.path.exists(exe):
        return shlex.quote(os.path.abspath(exe))
    return "nix-query"


def fzf_args(preview_command: str | None = None) -> list[str]:
    preview = preview_command or f"{self_command()} info --color {{1}}"
    return [
        "--multi",
        "--height=100%",
        f"--delimiter={FIELD_DELIMITER}",
        "--tiebreak=end",
        f"--preview={preview}",
        "--preview-window=down:wrap:50%",
    ]


class FzfSelector:
    """Pick attribute paths from the listing with fzf."""

    def __init__(self, runner: CommandRunner, fzf: str = "fzf"):
        self.runner = runner
        self.fzf = fzf

    def select(self, listing: str) -> list[str]:
        """Return the attribute paths the user selected, in fzf's output order."""
        args = fzf_args()
        logger.debug(f"[FZF] {self.fzf} {' '.join(args)}")
        try:
            output = self.runner.run(
                self.fzf, args, stdin=listing.encode("utf-8"), interactive=True
            )
        except CommandExitError as e:
            if e.returncode in NO_SELECTION_EXIT_CODES:
                logger.debug(f"[FZF] No selection (exit {e.returncode})")
                return []
            raise

        text = decode_output(output, self.fzf, args)
        return [attr_path_of(line) for line in text.splitlines() if line.strip()]
