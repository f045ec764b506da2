"""Tests for packmeta.versioning."""

from __future__ import annotations

import pytest

from packmeta.errors import MalformedVersionError
from packmeta.versioning import (
    PRERELEASE_ALL,
    PRERELEASE_NONE,
    PreReleaseKind,
    RangeKind,
    SemVer,
    VersionRange,
    VersionRequirement,
    parse_version_requirement,
)


def test_semver_parses_partial_and_four_part_versions() -> None:
    assert SemVer.parse("1.2") == SemVer(1, 2, 0)
    four = SemVer.parse("1.2.3.4")
    assert (four.major, four.minor, four.patch, four.build) == (1, 2, 3, 4)
    assert str(four) == "1.2.3.4"


def test_semver_keeps_prerelease_and_metadata() -> None:
    version = SemVer.parse("2.0.0-beta.2+sha.abc")
    assert version.prerelease == "beta.2"
    assert version.metadata == "sha.abc"
    assert version.is_prerelease
    assert version.normalize() == "2.0.0-beta.2"


@pytest.mark.parametrize("text", ["", "   ", "abc", "1.x", "1.2.3-", "v1.0"])
def test_semver_rejects_malformed_text(text: str) -> None:
    with pytest.raises(MalformedVersionError):
        SemVer.parse(text)


def test_semver_ordering_puts_prerelease_before_release() -> None:
    versions = [SemVer.parse(v) for v in ["1.0.0", "1.0.0-beta.10", "1.0.0-alpha", "0.9.9", "1.0.0-beta.2"]]
    assert [str(v) for v in sorted(versions)] == [
        "0.9.9",
        "1.0.0-alpha",
        "1.0.0-beta.2",
        "1.0.0-beta.10",
        "1.0.0",
    ]


def test_semver_equality_ignores_build_metadata() -> None:
    assert SemVer.parse("1.0.0+one") == SemVer.parse("1.0.0+two")
    assert len({SemVer.parse("1.0"), SemVer.parse("1.0.0")}) == 1


def test_parse_requirement_defaults_to_minimum() -> None:
    requirement = parse_version_requirement("1.2.3")
    assert requirement.range == VersionRange.minimum(SemVer.parse("1.2.3"))
    assert requirement.prerelease == PRERELEASE_NONE


def test_parse_requirement_operators() -> None:
    assert parse_version_requirement(">= 1.0").range.kind is RangeKind.MINIMUM
    assert parse_version_requirement("> 1.0").range.kind is RangeKind.GREATER_THAN
    assert parse_version_requirement("<= 1.0").range.kind is RangeKind.MAXIMUM
    assert parse_version_requirement("<1.0").range.kind is RangeKind.LESS_THAN
    assert parse_version_requirement("= 1.0").range.kind is RangeKind.SPECIFIC
    assert parse_version_requirement("== 1.0").range.kind is RangeKind.OVERRIDE_ALL


def test_parse_requirement_twiddle_wakka() -> None:
    requirement = parse_version_requirement("~> 1.2.3")
    assert requirement.range.kind is RangeKind.RANGE
    assert requirement.range.low == SemVer.parse("1.2.3")
    assert requirement.range.high == SemVer.parse("1.3")
    assert requirement.format_nuget() == "[1.2.3,1.3.0)"

    assert parse_version_requirement("~> 4.0").range.high == SemVer.parse("5.0")


def test_parse_requirement_with_two_bounds() -> None:
    requirement = parse_version_requirement(">= 1.0 < 2.0")
    assert requirement.format_nuget() == "[1.0.0,2.0.0)"


def test_parse_requirement_prerelease_names() -> None:
    assert parse_version_requirement(">= 1.0 prerelease").prerelease == PRERELEASE_ALL
    concrete = parse_version_requirement(">= 1.0 alpha beta").prerelease
    assert concrete.kind is PreReleaseKind.CONCRETE
    assert concrete.names == ("alpha", "beta")
    assert parse_version_requirement(">= 1.0-rc2").prerelease.names == ("rc",)


def test_parse_requirement_empty_allows_all_releases() -> None:
    assert parse_version_requirement("") == VersionRequirement.all_releases()
    assert VersionRequirement.all_releases().format_nuget() == ""


@pytest.mark.parametrize("text", [">=", "~> nope", ">= 1.0 >= 2.0"])
def test_parse_requirement_rejects_unsupported_forms(text: str) -> None:
    with pytest.raises(MalformedVersionError):
        parse_version_requirement(text)


def test_nuget_formatting_of_each_range_kind() -> None:
    v = SemVer.parse("1.2.3")
    assert VersionRange.minimum(v).format_nuget() == "1.2.3"
    assert VersionRange.greater_than(v).format_nuget() == "(1.2.3,)"
    assert VersionRange.maximum(v).format_nuget() == "(,1.2.3]"
    assert VersionRange.less_than(v).format_nuget() == "(,1.2.3)"
    assert VersionRange.specific(v).format_nuget() == "[1.2.3]"
    assert VersionRange.override_all(v).format_nuget() == "[1.2.3]"
