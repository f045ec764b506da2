"""Core data models shared across packmeta components."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from .versioning import SemVer, VersionRequirement

Dependency = Tuple[str, VersionRequirement]
FileMapping = Tuple[str, str]


@dataclass(frozen=True)
class ProjectCoreInfo:
    """Candidate core metadata; any field may still be missing."""

    id: Optional[str] = None
    version: Optional[SemVer] = None
    authors: Optional[Tuple[str, ...]] = None
    description: Optional[str] = None

    def missing_fields(self) -> Tuple[str, ...]:
        names = ("id", "version", "authors", "description")
        return tuple(name for name in names if getattr(self, name) is None)


@dataclass(frozen=True)
class CompleteCoreInfo:
    """Core metadata once id, authors and description are known.

    ``version`` keeps its optional type even after validation.
    """

    id: str
    version: Optional[SemVer]
    authors: Tuple[str, ...]
    description: str


@dataclass(frozen=True)
class OptionalPackageInfo:
    """Accumulated dependencies and files plus the optional descriptive fields.

    Dependencies and files grow by prepending; consumers must not rely on order.
    """

    dependencies: Tuple[Dependency, ...] = ()
    files: Tuple[FileMapping, ...] = ()
    title: Optional[str] = None
    owners: Tuple[str, ...] = ()
    summary: Optional[str] = None
    tags: Tuple[str, ...] = ()
    project_url: Optional[str] = None
    license_url: Optional[str] = None
    icon_url: Optional[str] = None
    release_notes: Optional[str] = None
    copyright: Optional[str] = None
    require_license_acceptance: bool = False

    def with_dependency(self, dependency: Dependency) -> "OptionalPackageInfo":
        return replace(self, dependencies=(dependency,) + self.dependencies)

    def with_file(self, mapping: FileMapping) -> "OptionalPackageInfo":
        return replace(self, files=(mapping,) + self.files)


@dataclass(frozen=True)
class CompleteInfo:
    """Template contents whose mandatory metadata is known."""

    core: CompleteCoreInfo
    optional: OptionalPackageInfo


@dataclass(frozen=True)
class ProjectInfo:
    """Template contents that still need metadata from the project's assembly.

    ``current_version_dependencies`` holds ``(name, requirement text)`` pairs
    whose text mentions ``CURRENTVERSION``; they become dependencies once the
    package version is final.
    """

    core: ProjectCoreInfo
    optional: OptionalPackageInfo
    current_version_dependencies: Tuple[Tuple[str, str], ...] = ()


TemplateContents = Union[CompleteInfo, ProjectInfo]


@dataclass(frozen=True)
class TemplateFile:
    """A package template: where it came from and what it describes."""

    file_name: str
    contents: TemplateContents

    @property
    def is_complete(self) -> bool:
        return isinstance(self.contents, CompleteInfo)


__all__ = [
    "CompleteCoreInfo",
    "CompleteInfo",
    "Dependency",
    "FileMapping",
    "OptionalPackageInfo",
    "ProjectCoreInfo",
    "ProjectInfo",
    "TemplateContents",
    "TemplateFile",
]
