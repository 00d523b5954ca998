"""Shared fixtures. No test starts nix-env or fzf."""

from pathlib import Path

import pytest

from nix_query.core.config import Settings
from nix_query.parsers.nix_env import QUERY_ARGS

DATA_DIR = Path(__file__).parent / "data"


def load_data(name: str) -> str:
    return (DATA_DIR / name).read_text(encoding="utf-8")


def json_query_args(attr: str) -> tuple[str, ...]:
    return (*QUERY_ARGS, "--json", "--attr", attr)


class FakeRunner:
    """
    CommandRunner returning canned output keyed by argument tuple.

    A response may be ``str`` (encoded as UTF-8), ``bytes``, or an
    exception instance to raise.
    """

    def __init__(self, responses=None, default=None):
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[tuple[str, list[str], bytes | None]] = []
        self.interactive: list[bool] = []

    def run(self, command, args, *, stdin=None, interactive=False) -> bytes:
        self.calls.append((command, list(args), stdin))
        self.interactive.append(interactive)
        response = self.responses.get(tuple(args), self.default)
        if response is None:
            raise AssertionError(f"Unexpected command: {command} {' '.join(args)}")
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return response.encode("utf-8")
        return response


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def settings(tmp_path):
    return Settings(cache_dir=tmp_path / "cache", extra_roots=("nixpkgs.nodePackages",))
