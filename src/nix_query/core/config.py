"""
Runtime settings, resolved once at startup.

The cache location is an explicit value handed to
:class:`~nix_query.core.cache.AttrCache`. When no cache directory can be
found, asking for :attr:`Settings.cache_path` raises
:class:`CacheUnavailableError`.
"""

import logging
import os
import platform
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from nix_query.exceptions import CacheUnavailableError
from nix_query.parsers.nix_env import DEFAULT_EXTRA_ROOTS, NIX_ENV

logger = logging.getLogger(__name__)

# Identifies this program so the cache file cannot collide with another
# application's.
CACHE_ID = "bfe01d7a-c700-4529-acf1-88065df2cd25"
CACHE_FILENAME = f"nix-query-{CACHE_ID}.cache"

ENV_CACHE_DIR = "NIX_QUERY_CACHE_DIR"
ENV_NIX_ENV = "NIX_QUERY_NIX_ENV"
ENV_EXTRA_ROOTS = "NIX_QUERY_EXTRA_ROOTS"
ENV_FZF = "NIX_QUERY_FZF"


def platform_cache_dir(environ: Mapping[str, str] | None = None, system: str | None = None) -> Path | None:
    """
    The user's cache directory, or ``None`` if it cannot be determined.

    Linux/BSD: ``$XDG_CACHE_HOME`` (when absolute) or ``~/.cache``.
    macOS: ``~/Library/Caches``. Windows: ``%LOCALAPPDATA%``.
    """
    env = os.environ if environ is None else environ
    system = system or platform.system()

    if system == "Windows":
        local = env.get("LOCALAPPDATA")
        return Path(local) if local else None

    home = env.get("HOME")
    if system == "Darwin":
        return Path(home) / "Library" / "Caches" if home else None

    xdg = env.get("XDG_CACHE_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    return Path(home) / ".cache" if home else None


@dataclass(frozen=True)
class Settings:
    """Everything nix-query needs to know about its environment."""

    cache_dir: Path | None
    nix_env: str = NIX_ENV
    extra_roots: tuple[str, ...] = DEFAULT_EXTRA_ROOTS
    fzf: str = "fzf"

    @property
    def cache_path(self) -> Path:
        """
        Full path of the cache file.

        Raises:
            CacheUnavailableError: if no cache directory could be resolved.
        """
        if self.cache_dir is None:
            raise CacheUnavailableError(
                "Could not determine a cache directory for this platform",
                hint=f"Set {ENV_CACHE_DIR} to a writable directory.",
            )
        return self.cache_dir / CACHE_FILENAME

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, system: str | None = None) -> "Settings":
        """
        Build settings from environment variables and platform defaults.

        An unresolvable cache directory is recorded as ``None``; it only
        becomes an error when the cache is actually needed.
        """
        env = os.environ if environ is None else environ

        override = env.get(ENV_CACHE_DIR)
        cache_dir = Path(override) if override else platform_cache_dir(env, system)

        extra_roots = DEFAULT_EXTRA_ROOTS
        if ENV_EXTRA_ROOTS in env:
            extra_roots = tuple(r.strip() for r in env[ENV_EXTRA_ROOTS].split(",") if r.strip())

        settings = cls(
            cache_dir=cache_dir,
            nix_env=env.get(ENV_NIX_ENV) or NIX_ENV,
            extra_roots=extra_roots,
            fzf=env.get(ENV_FZF) or "fzf",
        )
        logger.debug(f"[CONFIG] {settings}")
        return settings
