"""
Canonical package model.

``nix-env --query --available --json`` prints an object keyed by attribute
path; each value is decoded into a :class:`PackageRecord`. The model is
the same whichever of the historical JSON shapes produced it.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any

from nix_query.exceptions import SourcePositionParseError
from nix_query.models.license import (
    FullLicense,
    FullLicenseList,
    License,
    NamedLicense,
    PlainLicense,
    UrlLicense,
    decode_license,
)
from nix_query.models.maintainer import (
    Maintainer,
    PlainMaintainer,
    decode_maintainer,
)
from nix_query.models.schema import (
    SchemaError,
    defaulted_bool,
    defaulted_list,
    expect_object,
    optional_int,
    optional_str,
    require_str,
    string_list,
    type_name,
)

_LINE_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class SourcePosition:
    """Where a package is defined, from ``meta.position`` (``path:line``)."""

    path: str
    line: int

    @classmethod
    def parse(cls, value: str) -> "SourcePosition":
        """
        Parse ``path:line``.

        Only the first two ``:``-separated fields are read, so anything
        after the line number (a column, say) is ignored.
        """
        parts = value.split(":")
        if len(parts) < 2 or not _LINE_RE.fullmatch(parts[1]):
            raise SourcePositionParseError(value)
        line = int(parts[1])
        if line < 1:
            raise SourcePositionParseError(value)
        return cls(path=parts[0], line=line)

    def __str__(self) -> str:
        return f"{self.path}:{self.line}"


def decode_platforms(value: Any, path: str = "$.platforms") -> tuple[str, ...]:
    """
    Normalize ``meta.platforms`` to a flat tuple of strings.

    Some packages publish a list of lists of platforms; those are
    flattened one level, keeping encounter order. Mixed or deeper
    nesting is rejected.
    """
    if not isinstance(value, list):
        raise SchemaError(f"expected array, found {type_name(value)}", path)

    if all(isinstance(item, str) for item in value):
        return tuple(value)

    if all(isinstance(item, list) for item in value):
        flat: list[str] = []
        for i, group in enumerate(value):
            flat.extend(string_list(group, f"{path}[{i}]"))
        return tuple(flat)

    raise SchemaError("expected array of strings or array of string arrays", path)


@dataclass(frozen=True)
class PackageMeta:
    """``meta`` attribute set. Upstream data is inconsistent, so everything defaults."""

    available: bool = True
    broken: bool = False
    name: str | None = None
    description: str | None = None
    long_description: str | None = None
    homepage: str | None = None
    license: License | None = None
    outputs_to_install: tuple[str, ...] = ()
    platforms: tuple[str, ...] = ()
    position: SourcePosition | None = None
    priority: int | None = None
    maintainers: tuple[Maintainer, ...] = ()

    @classmethod
    def from_dict(cls, data: Any, path: str = "$.meta") -> "PackageMeta":
        """Decode a raw ``meta`` object. Raises :class:`SchemaError`."""
        obj = expect_object(data, path)

        license_value = obj.get("license")
        license = None if license_value is None else decode_license(license_value, f"{path}.license")

        platforms: tuple[str, ...] = ()
        if "platforms" in obj:
            platforms = decode_platforms(obj["platforms"], f"{path}.platforms")

        position = None
        position_value = optional_str(obj, "position", path)
        if position_value is not None:
            try:
                position = SourcePosition.parse(position_value)
            except SourcePositionParseError as e:
                raise SchemaError(str(e), f"{path}.position") from e

        maintainers_path = f"{path}.maintainers"
        maintainers = tuple(
            decode_maintainer(m, f"{maintainers_path}[{i}]")
            for i, m in enumerate(defaulted_list(obj, "maintainers", path))
        )

        return cls(
            available=defaulted_bool(obj, "available", True, path),
            broken=defaulted_bool(obj, "broken", False, path),
            name=optional_str(obj, "name", path),
            description=optional_str(obj, "description", path),
            long_description=optional_str(obj, "longDescription", path),
            homepage=optional_str(obj, "homepage", path),
            license=license,
            outputs_to_install=string_list(
                defaulted_list(obj, "outputsToInstall", path), f"{path}.outputsToInstall"
            ),
            platforms=platforms,
            position=position,
            priority=optional_int(obj, "priority", path),
            maintainers=maintainers,
        )

    def to_dict(self) -> dict:
        """Serialize back to the canonical ``nix-env`` JSON shape."""
        data: dict[str, Any] = {
            "available": self.available,
            "broken": self.broken,
            "outputsToInstall": list(self.outputs_to_install),
            "platforms": list(self.platforms),
            "maintainers": [encode_maintainer(m) for m in self.maintainers],
        }
        optional = {
            "name": self.name,
            "description": self.description,
            "longDescription": self.long_description,
            "homepage": self.homepage,
            "license": None if self.license is None else encode_license(self.license),
            "position": None if self.position is None else str(self.position),
            "priority": self.priority,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass(frozen=True)
class PackageRecord:
    """One resolved package, e.g. ``gzip-1.10`` on ``x86_64-linux``."""

    name: str
    short_name: str
    version: str
    platform_triple: str
    meta: PackageMeta = field(default_factory=PackageMeta)
    attribute_path: str | None = None

    def __post_init__(self):
        for attr in ("name", "short_name", "version", "platform_triple"):
            if not getattr(self, attr):
                raise ValueError(f"PackageRecord.{attr} must not be empty")

    def with_attribute_path(self, attribute_path: str) -> "PackageRecord":
        """Return a copy tagged with the attribute path that produced it."""
        return replace(self, attribute_path=attribute_path)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "PackageRecord":
        """
        Decode one package object from ``nix-env --json`` output.

        The attribute path is not part of the object; attach it with
        :meth:`with_attribute_path`.

        Raises:
            SchemaError: on any shape violation.
        """
        obj = expect_object(data, path)
        if "meta" not in obj:
            raise SchemaError("missing field 'meta'", path)

        fields = {
            "name": require_str(obj, "name", path),
            "short_name": require_str(obj, "pname", path),
            "version": require_str(obj, "version", path),
            "platform_triple": require_str(obj, "system", path),
        }
        for attr, value in fields.items():
            if not value:
                raise SchemaError(f"{attr} must not be empty", path)

        return cls(meta=PackageMeta.from_dict(obj["meta"], f"{path}.meta"), **fields)

    def to_dict(self) -> dict:
        """Serialize to the ``nix-env --json`` package shape (without the key)."""
        return {
            "name": self.name,
            "pname": self.short_name,
            "version": self.version,
            "system": self.platform_triple,
            "meta": self.meta.to_dict(),
        }


def encode_license(license: License) -> Any:
    """Inverse of :func:`~nix_query.models.license.decode_license`."""
    match license:
        case PlainLicense(id=license_id):
            return license_id
        case FullLicense():
            return _encode_full_license(license)
        case FullLicenseList(licenses=licenses):
            return [_encode_full_license(item) for item in licenses]
        case NamedLicense(full_name=full_name):
            return {"fullName": full_name}
        case UrlLicense(url=url):
            return {"url": url}
    raise TypeError(f"Not a license: {license!r}")


def _encode_full_license(license: FullLicense) -> dict:
    data: dict[str, Any] = {
        "fullName": license.full_name,
        "shortName": license.short_name,
        "free": license.free,
    }
    if license.spdx_id is not None:
        data["spdxId"] = license.spdx_id
    if license.url is not None:
        data["url"] = license.url
    return data


def encode_maintainer(maintainer: Maintainer) -> Any:
    """Inverse of :func:`~nix_query.models.maintainer.decode_maintainer`."""
    if isinstance(maintainer, PlainMaintainer):
        return maintainer.name

    data: dict[str, Any] = {"email": maintainer.email}
    if maintainer.name is not None:
        data["name"] = maintainer.name
    if maintainer.github is not None:
        data["github"] = maintainer.github
    if maintainer.github_id is not None:
        data["githubId"] = maintainer.github_id
    data["keys"] = [{"longkeyid": k.longkeyid, "fingerprint": k.fingerprint} for k in maintainer.keys]
    return data
