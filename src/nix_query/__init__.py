"""
nix-query - cached fuzzy search over the Nix package set.

Normalizes the loosely-schematized metadata printed by ``nix-env`` into a
canonical package model and keeps a compact listing of every attribute
in a local cache.
"""

__version__ = "0.1.2"


def __getattr__(name: str):
    """Lazy import for the model and query entry points."""
    if name == "PackageRecord":
        from nix_query.models.package import PackageRecord

        return PackageRecord
    if name == "query_attr":
        from nix_query.parsers.nix_env import query_attr

        return query_attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["PackageRecord", "query_attr", "__version__"]
