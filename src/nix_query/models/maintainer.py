"""
Maintainer variants found in ``meta.maintainers``.

Entries are either a bare name string or a ``lib.maintainers`` record.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from nix_query.models.schema import (
    SchemaError,
    defaulted_list,
    expect_object,
    optional_int,
    optional_str,
    require_str,
    type_name,
)


@dataclass(frozen=True)
class MaintainerKey:
    """A GPG key listed for a maintainer."""

    longkeyid: str
    fingerprint: str


@dataclass(frozen=True)
class PlainMaintainer:
    name: str


@dataclass(frozen=True)
class MaintainerInfo:
    email: str
    name: str | None = None
    github: str | None = None
    github_id: int | None = None
    keys: tuple[MaintainerKey, ...] = field(default_factory=tuple)


Maintainer = Union[PlainMaintainer, MaintainerInfo]


def _decode_key(value: Any, path: str) -> MaintainerKey:
    obj = expect_object(value, path)
    return MaintainerKey(
        longkeyid=require_str(obj, "longkeyid", path),
        fingerprint=require_str(obj, "fingerprint", path),
    )


def decode_maintainer(value: Any, path: str = "$.maintainer") -> Maintainer:
    """A string is a plain name; an object must be a full maintainer record."""
    if isinstance(value, str):
        return PlainMaintainer(name=value)

    if not isinstance(value, dict):
        raise SchemaError(
            f"expected maintainer name or record, found {type_name(value)}", path
        )

    github_id = optional_int(value, "githubId", path)
    if github_id is not None and github_id < 0:
        raise SchemaError(f"expected non-negative integer, found {github_id}", f"{path}.githubId")

    keys_path = f"{path}.keys"
    return MaintainerInfo(
        email=require_str(value, "email", path),
        name=optional_str(value, "name", path),
        github=optional_str(value, "github", path),
        github_id=github_id,
        keys=tuple(
            _decode_key(k, f"{keys_path}[{i}]")
            for i, k in enumerate(defaulted_list(value, "keys", path))
        ),
    )
