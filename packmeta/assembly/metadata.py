"""Core package metadata read from a project's compiled assembly."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Sequence, Union

from ..errors import AttributeEnumerationError
from ..files.project_file import ProjectFile, output_file_path
from ..logging import get_logger
from ..models import CompleteCoreInfo, ProjectCoreInfo
from ..versioning import SemVer
from .attributes import (
    Company,
    Description,
    InformationalVersion,
    MetadataAttribute,
    Version,
    classify_all,
)
from .loader import AssemblyLoader, DnfileAssemblyLoader, LoadedAssembly

logger = get_logger("assembly.metadata")


def get_id(assembly: LoadedAssembly, info: ProjectCoreInfo) -> ProjectCoreInfo:
    return replace(info, id=assembly.get_name().name)


def get_version(
    assembly: LoadedAssembly, attributes: Sequence[MetadataAttribute], info: ProjectCoreInfo
) -> ProjectCoreInfo:
    """Informational version first, then the assembly's own version, then AssemblyVersion."""
    version = _first(attributes, InformationalVersion)
    if version is None:
        declared = assembly.get_name().version
        if declared is not None:
            version = SemVer.parse(str(declared))
    if version is None:
        version = _first(attributes, Version)
    return replace(info, version=version)


def get_authors(attributes: Sequence[MetadataAttribute], info: ProjectCoreInfo) -> ProjectCoreInfo:
    company = _first(attributes, Company)
    authors = None
    if company is not None:
        authors = tuple(part.strip() for part in company.split(","))
    return replace(info, authors=authors)


def get_description(attributes: Sequence[MetadataAttribute], info: ProjectCoreInfo) -> ProjectCoreInfo:
    return replace(info, description=_first(attributes, Description))


def extract(assembly: LoadedAssembly, attributes: Sequence[MetadataAttribute]) -> ProjectCoreInfo:
    info = ProjectCoreInfo()
    info = get_id(assembly, info)
    info = get_version(assembly, attributes, info)
    info = get_authors(attributes, info)
    return get_description(attributes, info)


def load_assembly_metadata(
    build_config: str,
    project: ProjectFile,
    loader: Optional[AssemblyLoader] = None,
) -> ProjectCoreInfo:
    """Load the assembly ``project`` builds for ``build_config`` and extract its metadata."""
    file_name = output_file_path(build_config, project)
    logger.debug("Loading assembly metadata for %s", file_name)
    data = Path(file_name).read_bytes()
    assembly = (loader or DnfileAssemblyLoader()).load(data)
    try:
        raw_attributes = assembly.get_custom_attributes(True)
    except AttributeEnumerationError as exc:
        logger.warning("Loading custom attributes failed for %s.\nMessage: %s", assembly.full_name, exc)
        raw_attributes = assembly.get_custom_attributes(False)
    return extract(assembly, classify_all(raw_attributes))


@dataclass(frozen=True)
class Valid:
    info: CompleteCoreInfo


@dataclass(frozen=True)
class Invalid:
    pass


ValidationResult = Union[Valid, Invalid]


def validate(info: ProjectCoreInfo) -> ValidationResult:
    """Return :class:`Valid` when id, version, authors and description are all present."""
    if info.id is None or info.version is None or info.authors is None or info.description is None:
        return Invalid()
    return Valid(
        CompleteCoreInfo(
            id=info.id,
            version=info.version,
            authors=info.authors,
            description=info.description,
        )
    )


def _first(attributes: Sequence[MetadataAttribute], kind: type):
    for attribute in attributes:
        if isinstance(attribute, kind):
            return attribute.value
    return None


__all__ = [
    "Invalid",
    "Valid",
    "ValidationResult",
    "extract",
    "get_authors",
    "get_description",
    "get_id",
    "get_version",
    "load_assembly_metadata",
    "validate",
]
