"""Unit tests for NuGet versions and version ranges."""

from __future__ import annotations

import pytest

from nuget_downloader.versions import InvalidVersionError, NuGetVersion, VersionRange


def v(version_string: str) -> NuGetVersion:
    return NuGetVersion(version_string)


class TestNuGetVersion:
    """Tests for parsing and ordering NuGet versions."""

    def test_parse_parts(self) -> None:
        version = v("1.2.3.4-beta.1+abc")
        assert (version.major, version.minor, version.patch, version.revision) == (1, 2, 3, 4)
        assert version.prerelease == ("beta", "1")
        assert version.build == ("abc",)
        assert version.is_prerelease

    def test_str_keeps_version_text(self) -> None:
        assert str(v(" 1.0 ")) == "1.0"
        assert str(v("13.0.1")) == "13.0.1"

    def test_normalized(self) -> None:
        assert v("1.0").normalized == "1.0.0"
        assert v("1.0.0.0").normalized == "1.0.0"
        assert v("1.2.3.4").normalized == "1.2.3.4"
        assert v("1.0-RC.1").normalized == "1.0.0-RC.1"

    def test_missing_parts_are_zero(self) -> None:
        assert v("1") == v("1.0.0.0")
        assert v("1.0") == v("1.0.0")
        assert hash(v("1.0")) == hash(v("1.0.0"))

    def test_numeric_ordering(self) -> None:
        assert v("1.9") < v("1.10")
        assert v("1.0.0") < v("1.0.0.1")
        assert v("2.0") > v("1.99.99.99")

    def test_release_above_prerelease(self) -> None:
        assert v("1.0.0-rc") < v("1.0.0")
        assert v("1.0.0") < v("1.0.1-alpha")

    def test_prerelease_ordering(self) -> None:
        assert v("1.0.0-alpha") < v("1.0.0-alpha.1") < v("1.0.0-beta") < v("1.0.0-beta.2") < v("1.0.0-beta.11")
        assert v("1.0.0-1") < v("1.0.0-alpha")

    def test_prerelease_is_case_insensitive(self) -> None:
        assert v("1.0.0-Beta") == v("1.0.0-beta")

    def test_prerelease_leading_zeros(self) -> None:
        """Test numeric labels with leading zeros parse and compare by value."""
        version = v("1.0.0-beta.01")
        assert str(version) == "1.0.0-beta.01"
        assert version.prerelease == ("beta", "01")
        assert version == v("1.0.0-beta.1")
        assert v("1.0.0-beta.02") < v("1.0.0-beta.10") < v("1.0.0")
        assert v("1.0.0-007") < v("1.0.0-alpha")

    def test_build_metadata_ignored(self) -> None:
        assert v("1.0.0+one") == v("1.0.0+two")
        assert not v("1.0.0+one").is_prerelease

    def test_max(self) -> None:
        versions = [v(s) for s in ("0.9", "1.0", "1.5", "2.0-beta", "1.10")]
        assert max(versions) == v("2.0-beta")

    @pytest.mark.parametrize("text", ["", "abc", "1.", "1.2.3.4.5", "1.0-", "1.0.0-beta..1", "v1.0"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(InvalidVersionError):
            NuGetVersion(text)

    def test_invalid_version_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid NuGet version"):
            NuGetVersion("not-a-version")


class TestVersionRange:
    """Tests for NuGet interval notation."""

    def test_bare_version_is_minimum_inclusive(self) -> None:
        version_range = VersionRange.parse("1.0")
        assert version_range.min_version == v("1.0")
        assert version_range.min_inclusive
        assert version_range.max_version is None
        assert v("1.0") in version_range
        assert v("99.0") in version_range
        assert v("0.9") not in version_range

    def test_exact(self) -> None:
        version_range = VersionRange.parse("[1.5]")
        assert v("1.5.0") in version_range
        assert v("1.5.1") not in version_range
        assert str(version_range) == "[1.5]"

    def test_half_open(self) -> None:
        version_range = VersionRange.parse("[1.0, 2.0)")
        assert v("1.0") in version_range
        assert v("1.9.9") in version_range
        assert v("2.0") not in version_range
        assert v("0.9") not in version_range

    def test_exclusive_minimum(self) -> None:
        version_range = VersionRange.parse("(1.0,)")
        assert v("1.0") not in version_range
        assert v("1.0.1") in version_range

    def test_maximum_only(self) -> None:
        version_range = VersionRange.parse("(,1.0]")
        assert version_range.min_version is None
        assert v("0.1") in version_range
        assert v("1.0") in version_range
        assert v("1.0.1") not in version_range

    @pytest.mark.parametrize("text", [None, "", "   ", "(,)"])
    def test_unbounded(self, text: str | None) -> None:
        version_range = VersionRange.parse(text)
        assert version_range == VersionRange()
        assert v("0.0.1-alpha") in version_range
        assert v("1000.0") in version_range

    def test_str(self) -> None:
        assert str(VersionRange.parse("[1.0, 2.0)")) == "[1.0, 2.0)"
        assert str(VersionRange.parse("(,1.0]")) == "(, 1.0]"
        assert str(VersionRange.parse("[1.0,)")) == "1.0"
        assert str(VersionRange()) == "(,)"

    def test_contains_non_version(self) -> None:
        assert "1.0" not in VersionRange()

    @pytest.mark.parametrize("text", ["[1.0", "[1.0,2.0,3.0]", "(1.0)", "[1.0)", "[2.0, 1.0]", "[abc, )", "[]"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(InvalidVersionError):
            VersionRange.parse(text)
