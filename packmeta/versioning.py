"""Semantic versions and version requirements used in package manifests."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import List, Optional, Sequence, Tuple

from .errors import MalformedVersionError

_SEMVER_PATTERN = re.compile(
    r"^(?P<major>\d+)"
    r"(?:\.(?P<minor>\d+))?"
    r"(?:\.(?P<patch>\d+))?"
    r"(?:\.(?P<build>\d+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z][0-9A-Za-z.\-]*))?"
    r"(?:\+(?P<metadata>[0-9A-Za-z.\-]+))?$"
)
_OPERATOR_PATTERN = re.compile(r"(~>|==|>=|<=|>|<|=)")
_OPERATORS = {"~>", "==", ">=", "<=", ">", "<", "="}
_PRERELEASE_KEYWORD = "prerelease"


@total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A semantic version with an optional fourth numeric component."""

    major: int
    minor: int = 0
    patch: int = 0
    build: int = 0
    prerelease: Optional[str] = None
    metadata: str = ""
    original: Optional[str] = field(default=None, repr=False)

    @classmethod
    def parse(cls, text: str) -> "SemVer":
        """Parse ``text``; raise :class:`MalformedVersionError` when it is not a version."""
        if text is None:
            raise MalformedVersionError("Cannot parse a missing version string")
        candidate = text.strip()
        match = _SEMVER_PATTERN.match(candidate)
        if match is None:
            raise MalformedVersionError(f"'{text}' is not a valid semantic version")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor") or 0),
            patch=int(match.group("patch") or 0),
            build=int(match.group("build") or 0),
            prerelease=match.group("prerelease"),
            metadata=match.group("metadata") or "",
            original=candidate,
        )

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def normalize(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.build:
            text += f".{self.build}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        return text

    def _sort_key(self) -> tuple:
        # A release sorts after all of its pre-releases.
        if self.prerelease is None:
            pre_key: tuple = (1,)
        else:
            pre_key = (0, tuple(_identifier_key(part) for part in self.prerelease.split(".")))
        return (self.major, self.minor, self.patch, self.build, pre_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())

    def __str__(self) -> str:
        return self.original or self.normalize()


def _identifier_key(part: str) -> tuple:
    if part.isdigit():
        return (0, int(part), "")
    return (1, 0, part.lower())


class PreReleaseKind(Enum):
    NO = "no"
    ALL = "all"
    CONCRETE = "concrete"


@dataclass(frozen=True)
class PreReleaseStatus:
    """Which pre-release versions a requirement admits."""

    kind: PreReleaseKind = PreReleaseKind.NO
    names: Tuple[str, ...] = ()

    @classmethod
    def concrete(cls, names: Sequence[str]) -> "PreReleaseStatus":
        return cls(PreReleaseKind.CONCRETE, tuple(names))


PRERELEASE_NONE = PreReleaseStatus()
PRERELEASE_ALL = PreReleaseStatus(PreReleaseKind.ALL)


class RangeKind(Enum):
    MINIMUM = "minimum"
    GREATER_THAN = "greater_than"
    MAXIMUM = "maximum"
    LESS_THAN = "less_than"
    SPECIFIC = "specific"
    OVERRIDE_ALL = "override_all"
    RANGE = "range"


@dataclass(frozen=True)
class VersionRange:
    """A version constraint; bounds that a kind does not use stay ``None``."""

    kind: RangeKind
    low: Optional[SemVer] = None
    high: Optional[SemVer] = None
    include_low: bool = True
    include_high: bool = True

    @classmethod
    def minimum(cls, version: SemVer) -> "VersionRange":
        return cls(RangeKind.MINIMUM, low=version)

    @classmethod
    def greater_than(cls, version: SemVer) -> "VersionRange":
        return cls(RangeKind.GREATER_THAN, low=version, include_low=False)

    @classmethod
    def maximum(cls, version: SemVer) -> "VersionRange":
        return cls(RangeKind.MAXIMUM, high=version)

    @classmethod
    def less_than(cls, version: SemVer) -> "VersionRange":
        return cls(RangeKind.LESS_THAN, high=version, include_high=False)

    @classmethod
    def specific(cls, version: SemVer) -> "VersionRange":
        return cls(RangeKind.SPECIFIC, low=version, high=version)

    @classmethod
    def override_all(cls, version: SemVer) -> "VersionRange":
        return cls(RangeKind.OVERRIDE_ALL, low=version, high=version)

    @classmethod
    def between(
        cls,
        low: SemVer,
        high: SemVer,
        *,
        include_low: bool = True,
        include_high: bool = False,
    ) -> "VersionRange":
        return cls(
            RangeKind.RANGE,
            low=low,
            high=high,
            include_low=include_low,
            include_high=include_high,
        )

    def format_nuget(self) -> str:
        """Render the range in NuGet's interval notation."""
        low = self.low.normalize() if self.low is not None else ""
        high = self.high.normalize() if self.high is not None else ""
        if self.kind is RangeKind.MINIMUM:
            return "" if self.low == _ZERO else low
        if self.kind is RangeKind.GREATER_THAN:
            return f"({low},)"
        if self.kind is RangeKind.MAXIMUM:
            return f"(,{high}]"
        if self.kind is RangeKind.LESS_THAN:
            return f"(,{high})"
        if self.kind in (RangeKind.SPECIFIC, RangeKind.OVERRIDE_ALL):
            return f"[{low}]"
        opening = "[" if self.include_low else "("
        closing = "]" if self.include_high else ")"
        return f"{opening}{low},{high}{closing}"


_ZERO = SemVer(0)


@dataclass(frozen=True)
class VersionRequirement:
    """A version range together with the pre-release policy that applies to it."""

    range: VersionRange
    prerelease: PreReleaseStatus = PRERELEASE_NONE

    @classmethod
    def all_releases(cls) -> "VersionRequirement":
        return cls(VersionRange.minimum(_ZERO), PRERELEASE_NONE)

    def format_nuget(self) -> str:
        return self.range.format_nuget()

    def __str__(self) -> str:
        return self.format_nuget()


def parse_version_requirement(text: str) -> VersionRequirement:
    """Parse the dependency-file requirement syntax (``>= 1.0 < 2.0 prerelease``)."""
    tokens = _OPERATOR_PATTERN.sub(r" \1 ", text or "").split()
    if not tokens:
        return VersionRequirement.all_releases()

    constraints: List[Tuple[str, str]] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token in _OPERATORS:
            if index + 1 >= len(tokens):
                raise MalformedVersionError(f"Missing version after '{token}' in '{text}'")
            constraints.append((token, tokens[index + 1]))
            index += 2
        elif not constraints and token[:1].isdigit():
            constraints.append((">=", token))
            index += 1
        else:
            break
    names = tokens[index:]
    if not constraints:
        raise MalformedVersionError(f"'{text}' does not contain a version requirement")

    version_range = _build_range(text, constraints)
    return VersionRequirement(version_range, _prerelease_status(names, constraints))


def _build_range(text: str, constraints: List[Tuple[str, str]]) -> VersionRange:
    if len(constraints) == 1:
        operator, version_text = constraints[0]
        version = SemVer.parse(version_text)
        if operator == "~>":
            return VersionRange.between(version, _twiddle_upper_bound(version_text))
        if operator == ">=":
            return VersionRange.minimum(version)
        if operator == ">":
            return VersionRange.greater_than(version)
        if operator == "<=":
            return VersionRange.maximum(version)
        if operator == "<":
            return VersionRange.less_than(version)
        if operator == "==":
            return VersionRange.override_all(version)
        return VersionRange.specific(version)

    if len(constraints) == 2:
        (low_op, low_text), (high_op, high_text) = constraints
        if low_op in (">=", ">") and high_op in ("<=", "<"):
            return VersionRange.between(
                SemVer.parse(low_text),
                SemVer.parse(high_text),
                include_low=low_op == ">=",
                include_high=high_op == "<=",
            )
    raise MalformedVersionError(f"Unsupported version requirement '{text}'")


def _twiddle_upper_bound(version_text: str) -> SemVer:
    core = version_text.split("-", 1)[0].split("+", 1)[0]
    numbers = [int(part) for part in core.split(".")]
    position = max(len(numbers) - 2, 0)
    numbers = numbers[: position + 1]
    numbers[position] += 1
    return SemVer.parse(".".join(str(number) for number in numbers))


def _prerelease_status(names: Sequence[str], constraints: Sequence[Tuple[str, str]]) -> PreReleaseStatus:
    if names:
        if _PRERELEASE_KEYWORD in (name.lower() for name in names):
            return PRERELEASE_ALL
        return PreReleaseStatus.concrete(names)
    tags = []
    for _, version_text in constraints:
        version = SemVer.parse(version_text)
        if version.is_prerelease:
            tag = re.split(r"[.\d]", version.prerelease, maxsplit=1)[0] or version.prerelease
            tags.append(tag)
    if tags:
        return PreReleaseStatus.concrete(tags)
    return PRERELEASE_NONE


__all__ = [
    "PRERELEASE_ALL",
    "PRERELEASE_NONE",
    "PreReleaseKind",
    "PreReleaseStatus",
    "RangeKind",
    "SemVer",
    "VersionRange",
    "VersionRequirement",
    "parse_version_requirement",
]
