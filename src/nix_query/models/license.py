"""
License variants found in ``meta.license``.

nixpkgs has written this field in several shapes over the years and
``nix-env`` passes them through untouched:

    "MIT"                                         -> PlainLicense
    {"fullName": ..., "shortName": ..., ...}      -> FullLicense
    [{"fullName": ..., "shortName": ...}, ...]    -> FullLicenseList
    {"fullName": ...}                             -> NamedLicense
    {"url": ...}                                  -> UrlLicense

There is no discriminant field, so :func:`decode_license` tries each shape
in the order above and keeps the first that fits. FullLicense is tried
before NamedLicense and UrlLicense because its required fields are a
superset of theirs.
"""

from dataclasses import dataclass
from typing import Any, Callable, Union

from nix_query.models.schema import (
    SchemaError,
    defaulted_bool,
    expect_object,
    expect_str,
    optional_str,
    require_str,
    type_name,
)

# Placeholder names nixpkgs uses for licenses.unfree.
UNFREE_FULL_NAME = "Unfree"
UNFREE_SHORT_NAME = "unfree"


@dataclass(frozen=True)
class PlainLicense:
    """A bare license identifier, e.g. ``"MIT"``."""

    id: str


@dataclass(frozen=True)
class FullLicense:
    """A complete ``lib.licenses`` entry."""

    full_name: str
    short_name: str
    spdx_id: str | None = None
    url: str | None = None
    free: bool = True

    @property
    def has_full_name(self) -> bool:
        return self.full_name != UNFREE_FULL_NAME

    @property
    def has_short_name(self) -> bool:
        return self.short_name != UNFREE_SHORT_NAME


@dataclass(frozen=True)
class FullLicenseList:
    """Several complete licenses, e.g. for dual-licensed packages."""

    licenses: tuple[FullLicense, ...] = ()

    def __iter__(self):
        return iter(self.licenses)

    def __len__(self) -> int:
        return len(self.licenses)


@dataclass(frozen=True)
class NamedLicense:
    full_name: str


@dataclass(frozen=True)
class UrlLicense:
    url: str


License = Union[PlainLicense, FullLicense, FullLicenseList, NamedLicense, UrlLicense]


def _as_plain(value: Any, path: str) -> PlainLicense:
    return PlainLicense(id=expect_str(value, path))


def _as_full(value: Any, path: str) -> FullLicense:
    obj = expect_object(value, path)
    return FullLicense(
        full_name=require_str(obj, "fullName", path),
        short_name=require_str(obj, "shortName", path),
        spdx_id=optional_str(obj, "spdxId", path),
        url=optional_str(obj, "url", path),
        free=defaulted_bool(obj, "free", True, path),
    )


def _as_full_list(value: Any, path: str) -> FullLicenseList:
    if not isinstance(value, list):
        raise SchemaError(f"expected array, found {type_name(value)}", path)
    return FullLicenseList(
        licenses=tuple(_as_full(item, f"{path}[{i}]") for i, item in enumerate(value))
    )


def _as_named(value: Any, path: str) -> NamedLicense:
    obj = expect_object(value, path)
    return NamedLicense(full_name=require_str(obj, "fullName", path))


def _as_url(value: Any, path: str) -> UrlLicense:
    obj = expect_object(value, path)
    return UrlLicense(url=require_str(obj, "url", path))


# Most specific first. Do not reorder.
LICENSE_SHAPES: tuple[tuple[str, Callable[[Any, str], License]], ...] = (
    ("id", _as_plain),
    ("full", _as_full),
    ("full list", _as_full_list),
    ("name only", _as_named),
    ("url only", _as_url),
)


def decode_license(value: Any, path: str = "$.license") -> License:
    """
    Resolve a raw ``meta.license`` value to a License variant.

    Raises:
        SchemaError: if the value fits none of the known shapes. The
            message lists why each shape was rejected.
    """
    rejected = []
    for shape, attempt in LICENSE_SHAPES:
        try:
            return attempt(value, path)
        except SchemaError as e:
            rejected.append(f"{shape} ({e})")

    raise SchemaError(
        "does not match any known license shape: " + "; ".join(rejected),
        path,
    )
