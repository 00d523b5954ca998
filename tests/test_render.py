"""Tests for console rendering."""

import pytest

from conftest import load_data
from nix_query.models.license import (
    FullLicense,
    FullLicenseList,
    NamedLicense,
    PlainLicense,
    UrlLicense,
    decode_license,
)
from nix_query.models.package import PackageMeta, PackageRecord, SourcePosition
from nix_query.parsers.nix_env import decode_records
from nix_query.render.console import (
    ALERT_STYLE,
    URL_STYLE,
    render_license,
    render_record,
)


def _record(**meta):
    return PackageRecord(
        name="x-1.0",
        short_name="x",
        version="1.0",
        platform_triple="x86_64-linux",
        meta=PackageMeta(**meta),
    )


def _styles_of(text, substring):
    """Styles of the spans covering ``substring``."""
    start = text.plain.index(substring)
    end = start + len(substring)
    styles = {str(span.style) for span in text.spans if span.start <= start and span.end >= end}
    if text.style:
        styles.add(str(text.style))
    return styles


# ═══════════════════════════════════════════
# Licenses
# ═══════════════════════════════════════════


class TestLicenseRendering:
    def test_plain_id(self):
        assert render_license(PlainLicense(id="MIT")).plain == "MIT"

    def test_named(self):
        assert render_license(NamedLicense(full_name="Public Domain")).plain == "Public Domain"

    def test_url_is_styled(self):
        text = render_license(UrlLicense(url="https://example.org/L"))
        assert text.plain == "https://example.org/L"
        assert URL_STYLE in _styles_of(text, "https://example.org/L")

    def test_free_without_spdx_or_url_shows_full_name(self):
        lic = decode_license(
            {"fullName": "GNU General Public License v3.0", "shortName": "gpl3", "free": True}
        )
        assert render_license(lic).plain == "gpl3 (GNU General Public License v3.0)"

    def test_free_prefers_spdx(self):
        lic = FullLicense(full_name="MIT License", short_name="mit", spdx_id="MIT")
        assert render_license(lic).plain == "MIT"

    def test_free_with_url_omits_full_name(self):
        lic = FullLicense(full_name="MIT License", short_name="mit", url="https://mit.example")
        assert render_license(lic).plain == "mit https://mit.example"

    def test_free_spdx_and_url(self):
        lic = FullLicense(full_name="MIT License", short_name="mit", spdx_id="MIT", url="https://mit.example")
        assert render_license(lic).plain == "MIT https://mit.example"

    def test_unfree_both_names(self):
        lic = decode_license({"fullName": "Acme EULA", "shortName": "acme-eula", "free": False})
        text = render_license(lic)
        assert text.plain == "Acme EULA (unfree; acme-eula)"
        assert "https" not in text.plain
        assert ALERT_STYLE in _styles_of(text, "unfree")

    def test_unfree_placeholder_names(self):
        lic = FullLicense(full_name="Unfree", short_name="unfree", free=False)
        assert render_license(lic).plain == "unfree"

    def test_unfree_short_name_only(self):
        lic = FullLicense(full_name="Unfree", short_name="acme", free=False)
        assert render_license(lic).plain == "unfree (acme)"

    def test_unfree_full_name_only(self):
        lic = FullLicense(full_name="Acme EULA", short_name="unfree", free=False)
        assert render_license(lic).plain == "Acme EULA (unfree)"

    def test_unfree_with_url(self):
        lic = FullLicense(full_name="Acme EULA", short_name="acme", url="https://acme.example", free=False)
        assert render_license(lic).plain == "Acme EULA (unfree; acme) https://acme.example"

    def test_list_aligned_under_label(self):
        lic = FullLicenseList(
            licenses=(
                FullLicense(full_name="A", short_name="a", spdx_id="A-1"),
                FullLicense(full_name="B", short_name="b", spdx_id="B-2"),
                FullLicense(full_name="C", short_name="c", free=False),
            )
        )
        assert render_license(lic).plain == "A-1\n         B-2\n         C (unfree; c)"

    def test_single_entry_list(self):
        lic = FullLicenseList(licenses=(FullLicense(full_name="A", short_name="a", spdx_id="A-1"),))
        assert render_license(lic).plain == "A-1"


# ═══════════════════════════════════════════
# Records
# ═══════════════════════════════════════════


class TestRecordRendering:
    def test_minimal_record(self):
        assert render_record(_record()).plain == "name: x-1.0\n"

    def test_absent_fields_have_no_label(self):
        plain = render_record(_record()).plain
        for label in ("attr:", "broken:", "available:", "priority:", "homepage:", "license:", "defined in:"):
            assert label not in plain

    def test_flags(self):
        plain = render_record(_record(broken=True, available=False)).plain
        assert plain == "name: x-1.0\nbroken: true\navailable: false\n"

    def test_field_order(self):
        record = _record(
            broken=True,
            available=False,
            priority=10,
            homepage="https://x.example",
            description="Short",
            long_description="First line\nSecond line\n",
            license=PlainLicense(id="MIT"),
            position=SourcePosition(path="/pkgs/x.nix", line=7),
        ).with_attribute_path("nixpkgs.x")

        assert render_record(record).plain == (
            "attr: nixpkgs.x\n"
            "name: x-1.0\n"
            "broken: true\n"
            "available: false\n"
            "priority: 10\n"
            "homepage: https://x.example\n"
            "description: Short\n"
            "long desc.: First line\n"
            "            Second line\n"
            "license: MIT\n"
            "defined in: /pkgs/x.nix line 7\n"
        )

    def test_long_description_splits_on_newlines_only(self):
        plain = render_record(_record(long_description="a\x1cb c\r\nd")).plain
        assert plain.endswith("long desc.: a\x1cb c\n            d\n")

    def test_long_description_trailing_newline(self):
        plain = render_record(_record(long_description="one\n\ntwo\n")).plain
        assert plain.endswith("long desc.: one\n            \n            two\n")

    def test_empty_long_description_skipped(self):
        assert "long desc." not in render_record(_record(long_description="")).plain

    def test_license_list_in_record(self):
        lic = FullLicenseList(
            licenses=(
                FullLicense(full_name="A", short_name="a", spdx_id="A-1"),
                FullLicense(full_name="B", short_name="b", spdx_id="B-2"),
            )
        )
        lines = render_record(_record(license=lic)).plain.splitlines()
        assert lines[-2:] == ["license: A-1", "         B-2"]
        assert lines[-1].index("B-2") == lines[-2].index("A-1")

    def test_markup_in_description_not_interpreted(self):
        plain = render_record(_record(description="[bold]not markup[/bold]")).plain
        assert "description: [bold]not markup[/bold]" in plain

    @pytest.mark.parametrize("fixture", ["gzip.json", "spotify.json", "gcc.json", "acpitool.json"])
    def test_fixtures_render(self, fixture):
        attr, record = next(iter(decode_records(load_data(fixture)).items()))
        plain = render_record(record.with_attribute_path(attr)).plain
        assert plain.startswith(f"attr: {attr}\nname: {record.name}\n")
        assert plain.endswith("\n")

    def test_gzip(self):
        record = decode_records(load_data("gzip.json"))["nixpkgs.gzip"].with_attribute_path("nixpkgs.gzip")
        plain = render_record(record).plain
        assert "priority: 10\n" in plain
        assert "license: GPL-3.0-or-later https://spdx.org/licenses/GPL-3.0-or-later.html\n" in plain
        assert "            decompression part.\n" in plain
        assert plain.endswith("gzip/default.nix line 36\n")
