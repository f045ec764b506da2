"""Assembly-level metadata attributes and their classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..versioning import SemVer


# Attributes as enumerated from a loaded assembly.


@dataclass(frozen=True)
class AssemblyTitleAttribute:
    title: Optional[str]


@dataclass(frozen=True)
class AssemblyDescriptionAttribute:
    description: Optional[str]


@dataclass(frozen=True)
class AssemblyVersionAttribute:
    version: Optional[str]


@dataclass(frozen=True)
class AssemblyInformationalVersionAttribute:
    informational_version: Optional[str]


@dataclass(frozen=True)
class AssemblyCompanyAttribute:
    company: Optional[str]


@dataclass(frozen=True)
class CustomAttribute:
    """Any other attribute; ``value`` holds the undecoded blob."""

    type_name: str
    value: bytes = b""


# Classified attributes.


@dataclass(frozen=True)
class Title:
    value: str


@dataclass(frozen=True)
class Description:
    value: str


@dataclass(frozen=True)
class Version:
    value: SemVer


@dataclass(frozen=True)
class InformationalVersion:
    value: SemVer


@dataclass(frozen=True)
class Company:
    value: str


@dataclass(frozen=True)
class Ignore:
    pass


IGNORE = Ignore()

MetadataAttribute = Union[Title, Description, Version, InformationalVersion, Company, Ignore]


def classify(attribute: object) -> MetadataAttribute:
    """Map an enumerated attribute onto the metadata it contributes.

    Blank payloads are ignored. Version payloads must parse as semantic
    versions; a malformed one raises :class:`~packmeta.errors.MalformedVersionError`.
    """
    if isinstance(attribute, AssemblyTitleAttribute):
        return Title(attribute.title) if _has_text(attribute.title) else IGNORE
    if isinstance(attribute, AssemblyDescriptionAttribute):
        return Description(attribute.description) if _has_text(attribute.description) else IGNORE
    if isinstance(attribute, AssemblyVersionAttribute):
        if not _has_text(attribute.version):
            return IGNORE
        return Version(SemVer.parse(attribute.version))
    if isinstance(attribute, AssemblyInformationalVersionAttribute):
        if not _has_text(attribute.informational_version):
            return IGNORE
        return InformationalVersion(SemVer.parse(attribute.informational_version))
    if isinstance(attribute, AssemblyCompanyAttribute):
        return Company(attribute.company) if _has_text(attribute.company) else IGNORE
    return IGNORE


def classify_all(attributes) -> Tuple[MetadataAttribute, ...]:
    return tuple(classify(attribute) for attribute in attributes)


def _has_text(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


__all__ = [
    "AssemblyCompanyAttribute",
    "AssemblyDescriptionAttribute",
    "AssemblyInformationalVersionAttribute",
    "AssemblyTitleAttribute",
    "AssemblyVersionAttribute",
    "Company",
    "CustomAttribute",
    "Description",
    "IGNORE",
    "Ignore",
    "InformationalVersion",
    "MetadataAttribute",
    "Title",
    "Version",
    "classify",
    "classify_all",
]
