"""
Attribute cache: a single-file snapshot of the rewritten nix-env listing.

Listing every attribute takes a minute or two, so the result is kept on
disk and replaced wholesale when it is cleared. There is no locking:
concurrent writers race and the last one wins. The cache is advisory and
can always be regenerated.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from nix_query.exceptions import CacheIOError

logger = logging.getLogger(__name__)


class AttrCache:
    """
    The cache file at ``path``.

    Example:
        cache = AttrCache(settings.cache_path)
        listing = cache.ensure(lambda: query_all(runner))
    """

    def __init__(self, path: Path):
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def clear(self) -> None:
        """Delete the cache file. A missing file counts as success."""
        try:
            self.path.unlink()
            logger.info(f"[CACHE] Removed {self.path}")
        except FileNotFoundError:
            logger.debug(f"[CACHE] Nothing to clear at {self.path}")
        except OSError as e:
            raise CacheIOError(f"Could not remove cache file {self.path}: {e}") from e

    def write(self, listing: str) -> None:
        """Create or overwrite the cache file with ``listing``."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(listing.encode("utf-8"))
        except OSError as e:
            raise CacheIOError(f"Could not write cache file {self.path}: {e}") from e
        logger.info(f"[CACHE] Wrote {len(listing)} characters to {self.path}")

    def read(self) -> str:
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise CacheIOError(f"Could not read cache file {self.path}: {e}") from e

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CacheIOError(
                f"Cache file {self.path} is not valid UTF-8",
                hint="Run `nix-query clear-cache` to regenerate it.",
            ) from e

    def ensure(self, populate: Callable[[], str]) -> str:
        """
        Return the cached listing, calling ``populate`` once to fill a
        missing cache. Errors from ``populate`` propagate unchanged.
        """
        if self.exists():
            return self.read()

        logger.info(f"[CACHE] No cache at {self.path}; populating")
        listing = populate()
        self.write(listing)
        return listing
