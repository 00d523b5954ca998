"""
nix-env Output Parsers
======================

Two kinds of ``nix-env --query --available`` output are consumed here:

1. ``--json`` output for one attribute, decoded into
   :class:`~nix_query.models.package.PackageRecord` values.
2. The plain ``--attr-path --description`` listing of every attribute,
   rewritten into the compact line format stored in the cache.

nix-env aligns the plain listing into very wide columns:

    nixos._0x0                                   0x0-2018-06-24                 A client for 0x0.st

Each run of two or more spaces becomes :data:`FIELD_DELIMITER`, trailing
whitespace is trimmed and "private" attributes (a ``._`` in the attribute
path) are dropped, which shrinks the listing considerably.
"""

import json
import logging
import re
from collections.abc import Iterable, Sequence

from nix_query.core.proc import CommandRunner, run_stdout
from nix_query.exceptions import EmptyResultError, MetadataDecodeError
from nix_query.models.package import PackageRecord
from nix_query.models.schema import SchemaError, type_name

logger = logging.getLogger(__name__)

NIX_ENV = "nix-env"

FIELD_DELIMITER = "    "

# Sub-trees that the default listing leaves out.
DEFAULT_EXTRA_ROOTS = ("nixpkgs.nodePackages", "nixpkgs.haskellPackages")

QUERY_ARGS = ("--query", "--available")
LISTING_ARGS = (*QUERY_ARGS, "--attr-path", "--description")

PRIVATE_ATTR_MARKER = "._"

_COLUMN_GAP = re.compile(r" {2,}")


# ──────────────────────────────────────────────
# JSON metadata
# ──────────────────────────────────────────────


def decode_records(text: str) -> dict[str, PackageRecord]:
    """
    Decode ``nix-env --json`` output into records keyed by attribute path.

    The records do not carry their attribute path; see
    :func:`query_attr`.

    Raises:
        MetadataDecodeError: if the text is not JSON or any package in it
            does not fit the schema.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetadataDecodeError(f"invalid JSON: {e}", text) from e

    if not isinstance(data, dict):
        raise MetadataDecodeError(f"$: expected object, found {type_name(data)}", text)

    records = {}
    for attr, package in data.items():
        try:
            records[attr] = PackageRecord.from_dict(package, path=f"$[{attr!r}]")
        except SchemaError as e:
            raise MetadataDecodeError(str(e), text) from e

    return records


def query_attr(runner: CommandRunner, attr: str, nix_env: str = NIX_ENV) -> PackageRecord:
    """
    Look up a single attribute, e.g. ``nixpkgs.gzip``.

    Raises:
        EmptyResultError: if nix-env answers with an empty object.
        MetadataDecodeError: if the answer does not fit the schema.
        CommandError: if nix-env fails.
    """
    text = run_stdout(runner, nix_env, [*QUERY_ARGS, "--json", "--attr", attr])
    records = decode_records(text)

    if not records:
        raise EmptyResultError(attr)

    if len(records) > 1:
        logger.warning(
            f"[NIX-ENV] Query for {attr} returned {len(records)} packages; using the first"
        )

    found_attr, record = next(iter(records.items()))
    logger.debug(f"[NIX-ENV] {found_attr}: {record.name} ({record.platform_triple})")
    return record.with_attribute_path(found_attr)


# ──────────────────────────────────────────────
# Plain listing
# ──────────────────────────────────────────────


def attr_path_of(line: str) -> str:
    """First column of a listing line."""
    return _COLUMN_GAP.split(line, maxsplit=1)[0]


def is_private_attr(attr: str) -> bool:
    """Attributes with a ``_``-prefixed component are conventionally private."""
    return PRIVATE_ATTR_MARKER in attr


def rewrite_attr_line(line: str) -> str:
    """Collapse column gaps into :data:`FIELD_DELIMITER` and trim the line end."""
    return _COLUMN_GAP.sub(FIELD_DELIMITER, line).rstrip()


def rewrite_attr_lines(text: str) -> str:
    """
    Rewrite a whole listing, dropping private attributes.

    Every kept line ends with exactly one ``\\n``. Rewriting already
    rewritten text returns it unchanged.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    out = []
    for line in lines:
        if is_private_attr(attr_path_of(line)):
            continue
        out.append(rewrite_attr_line(line))
        out.append("\n")
    return "".join(out)


def query_all(
    runner: CommandRunner,
    extra_roots: Iterable[str] = DEFAULT_EXTRA_ROOTS,
    nix_env: str = NIX_ENV,
) -> str:
    """
    List every available attribute in cache format.

    The default tree is listed first, then each of ``extra_roots`` with
    ``--attr ROOT``; the rewritten outputs are concatenated in that order.
    """
    invocations: list[tuple[str, Sequence[str]]] = [("default tree", LISTING_ARGS)]
    invocations.extend((root, (*LISTING_ARGS, "--attr", root)) for root in extra_roots)

    chunks = []
    for label, args in invocations:
        logger.info(f"[NIX-ENV] Listing {label}")
        listing = rewrite_attr_lines(run_stdout(runner, nix_env, args))
        kept = listing.count("\n")
        logger.debug(f"[NIX-ENV] Kept {kept} attributes")
        chunks.append(listing)

    return "".join(chunks)


def listed_attrs(listing: str) -> list[str]:
    """Attribute paths from cache-format text, in listing order."""
    return [attr_path_of(line) for line in listing.splitlines() if line.strip()]
