"""
Console rendering of package records.

Everything renders to :class:`rich.text.Text` so callers decide whether
the styling becomes ANSI escapes (a terminal or a preview pane) or is
dropped (``Text.plain``).
"""

from rich.text import Text

from nix_query.models.license import (
    FullLicense,
    FullLicenseList,
    License,
    NamedLicense,
    PlainLicense,
    UrlLicense,
)
from nix_query.models.package import PackageRecord, SourcePosition

LABEL_STYLE = "bold"
HIGHLIGHT_STYLE = "bold green"
ALERT_STYLE = "bold red"
URL_STYLE = "underline cyan"
PATH_STYLE = "underline"

UNFREE_MARKER = "unfree"


def _indent_for(label: str) -> str:
    """Blank prefix lining continuation lines up under ``label: value``."""
    return " " * (len(label) + 2)


LICENSE_LABEL = "license"
LONG_DESCRIPTION_LABEL = "long desc."


# ──────────────────────────────────────────────
# Licenses
# ──────────────────────────────────────────────


def render_full_license(license: FullLicense) -> Text:
    """
    Free licenses prefer the SPDX id. Unfree ones always show a red
    ``unfree`` marker next to whichever names are meaningful.
    """
    text = _render_free(license) if license.free else _render_unfree(license)
    if license.url is not None:
        text.append(" ")
        text.append(license.url, style=URL_STYLE)
    return text


def _render_free(license: FullLicense) -> Text:
    if license.spdx_id is not None:
        return Text(license.spdx_id)

    text = Text(license.short_name)
    # A lone short name like "gpl3" says little without a URL to follow.
    if license.url is None:
        text.append(f" ({license.full_name})")
    return text


def _render_unfree(license: FullLicense) -> Text:
    text = Text()
    parenthetical = False

    if license.has_full_name:
        text.append(f"{license.full_name} (")
        text.append(UNFREE_MARKER, style=ALERT_STYLE)
        parenthetical = True
    else:
        text.append(UNFREE_MARKER, style=ALERT_STYLE)

    if license.has_short_name:
        text.append("; " if parenthetical else " (")
        text.append(f"{license.short_name})")
    elif parenthetical:
        text.append(")")

    return text


def render_license(license: License) -> Text:
    match license:
        case PlainLicense(id=license_id):
            return Text(license_id)
        case NamedLicense(full_name=full_name):
            return Text(full_name)
        case UrlLicense(url=url):
            return Text(url, style=URL_STYLE)
        case FullLicense():
            return render_full_license(license)
        case FullLicenseList(licenses=licenses):
            separator = "\n" + _indent_for(LICENSE_LABEL)
            return Text(separator).join(render_full_license(item) for item in licenses)
    raise TypeError(f"Not a license: {license!r}")


# ──────────────────────────────────────────────
# Records
# ──────────────────────────────────────────────


def _write_field(out: Text, label: str, value: Text | str) -> None:
    out.append(f"{label}:", style=LABEL_STYLE)
    out.append(" ")
    out.append(value)
    out.append("\n")


def _split_lines(text: str) -> list[str]:
    """Split on ``\\n`` and ``\\r\\n`` only; a trailing newline adds no empty line."""
    *complete, last = text.split("\n")
    lines = [line.removesuffix("\r") for line in complete]
    if last:
        lines.append(last)
    return lines


def render_position(position: SourcePosition) -> Text:
    text = Text(position.path, style=PATH_STYLE)
    text.append(f" line {position.line}")
    return text


def render_record(record: PackageRecord) -> Text:
    """
    Render one record as labeled lines.

    Absent optional fields are skipped entirely, label included. The
    order is fixed: attr, name, broken, available, priority, homepage,
    description, long description, license, definition position.
    """
    out = Text()
    meta = record.meta

    if record.attribute_path is not None:
        _write_field(out, "attr", Text(record.attribute_path, style=HIGHLIGHT_STYLE))
    _write_field(out, "name", Text(record.name, style=HIGHLIGHT_STYLE))

    if meta.broken:
        _write_field(out, "broken", Text("true", style=ALERT_STYLE))
    if not meta.available:
        _write_field(out, "available", Text("false", style=ALERT_STYLE))

    if meta.priority is not None:
        _write_field(out, "priority", str(meta.priority))

    if meta.homepage is not None:
        _write_field(out, "homepage", Text(meta.homepage, style=URL_STYLE))

    if meta.description is not None:
        _write_field(out, "description", meta.description)

    if meta.long_description is not None:
        lines = _split_lines(meta.long_description)
        if lines:
            _write_field(out, LONG_DESCRIPTION_LABEL, lines[0])
            indent = _indent_for(LONG_DESCRIPTION_LABEL)
            for line in lines[1:]:
                out.append(f"{indent}{line}\n")

    if meta.license is not None:
        _write_field(out, LICENSE_LABEL, render_license(meta.license))

    if meta.position is not None:
        _write_field(out, "defined in", render_position(meta.position))

    return out
