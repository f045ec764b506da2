"""Package template reader (``paket.template``).

A template is a sequence of ``key value`` lines. A key without a value opens a
block whose indented lines belong to it::

    type project
    authors Acme, Globex
    dependencies
        FSharp.Core >= 4.0
    files
        content/readme.txt ==> content

``type file`` templates carry all of their metadata; ``type project`` templates
are completed from the assembly of the project that sits next to them.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import MalformedVersionError, TemplateFileError
from ..logging import get_logger
from ..models import (
    CompleteCoreInfo,
    CompleteInfo,
    Dependency,
    FileMapping,
    OptionalPackageInfo,
    ProjectCoreInfo,
    ProjectInfo,
    TemplateFile,
)
from ..versioning import SemVer, VersionRequirement, parse_version_requirement

TEMPLATE_FILE_NAME = "paket.template"
CURRENT_VERSION = "CURRENTVERSION"
DEFAULT_FILE_TARGET = "lib"

_KNOWN_KEYS = {
    "type",
    "id",
    "version",
    "authors",
    "owners",
    "title",
    "summary",
    "description",
    "tags",
    "projecturl",
    "licenseurl",
    "iconurl",
    "releasenotes",
    "copyright",
    "requirelicenseacceptance",
    "dependencies",
    "files",
}

logger = get_logger("files.template")


def load_template(path: Path | str) -> TemplateFile:
    source = Path(path)
    return parse_template(str(source), source.read_text(encoding="utf-8-sig"))


def parse_template(file_name: str, text: str) -> TemplateFile:
    """Parse template ``text``; ``file_name`` is only used for messages and identity.

    Project templates keep ``CURRENTVERSION`` dependencies unresolved because
    their version is only final once assembly metadata and overrides apply.
    """
    fields = _read_fields(file_name, text)
    template_type = (fields.get("type") or "").strip().lower()
    if template_type not in {"project", "file"}:
        raise TemplateFileError(f"{file_name}: template type must be 'project' or 'file'")

    core = ProjectCoreInfo(
        id=_single_line(fields.get("id")),
        version=_parse_version(file_name, fields.get("version")),
        authors=_split_list(fields.get("authors")),
        description=fields.get("description") or None,
    )
    declared = _dependency_lines(fields.get("dependencies"))
    optional = OptionalPackageInfo(
        files=_parse_files(fields.get("files")),
        title=_single_line(fields.get("title")),
        owners=_split_list(fields.get("owners")) or (),
        summary=fields.get("summary") or None,
        tags=_split_tags(fields.get("tags")),
        project_url=_single_line(fields.get("projecturl")),
        license_url=_single_line(fields.get("licenseurl")),
        icon_url=_single_line(fields.get("iconurl")),
        release_notes=fields.get("releasenotes") or None,
        copyright=_single_line(fields.get("copyright")),
        require_license_acceptance=(fields.get("requirelicenseacceptance") or "").strip().lower() == "true",
    )

    if template_type == "project":
        fixed = tuple(line for line in declared if CURRENT_VERSION not in line[1])
        deferred = tuple(line for line in declared if CURRENT_VERSION in line[1])
        optional = replace(optional, dependencies=resolve_dependencies(file_name, fixed, None))
        return TemplateFile(file_name=file_name, contents=ProjectInfo(core, optional, deferred))

    if core.id is None or core.version is None or core.authors is None or core.description is None:
        raise TemplateFileError(
            f"{file_name}: file templates must specify {', '.join(core.missing_fields())}"
        )
    complete = CompleteCoreInfo(
        id=core.id,
        version=core.version,
        authors=core.authors,
        description=core.description,
    )
    optional = replace(optional, dependencies=resolve_dependencies(file_name, declared, core.version))
    return TemplateFile(file_name=file_name, contents=CompleteInfo(complete, optional))


def resolve_dependencies(
    file_name: str, lines: Sequence[Tuple[str, str]], version: Optional[SemVer]
) -> Tuple[Dependency, ...]:
    """Parse ``(name, requirement text)`` pairs, substituting ``CURRENTVERSION`` with ``version``."""
    dependencies: List[Dependency] = []
    for name, requirement_text in lines:
        if CURRENT_VERSION in requirement_text:
            if version is None:
                raise TemplateFileError(
                    f"{file_name}: {CURRENT_VERSION} used for {name} but the package has no version"
                )
            requirement_text = requirement_text.replace(CURRENT_VERSION, version.normalize())
        try:
            requirement = (
                parse_version_requirement(requirement_text)
                if requirement_text
                else VersionRequirement.all_releases()
            )
        except MalformedVersionError as exc:
            raise TemplateFileError(f"{file_name}: dependency {name}: {exc}") from exc
        dependencies.append((name, requirement))
    return tuple(dependencies)


def _read_fields(file_name: str, text: str) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    key: Optional[str] = None
    lines: List[str] = []

    def _flush() -> None:
        if key is None:
            return
        if key in fields:
            raise TemplateFileError(f"{file_name}: '{key}' is specified more than once")
        if key in _KNOWN_KEYS:
            fields[key] = "\n".join(lines).strip()
        else:
            logger.debug("Ignoring unsupported template field '%s' in %s", key, file_name)

    for number, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith(("#", "//")):
            continue
        if raw[:1] in (" ", "\t"):
            if key is None:
                raise TemplateFileError(f"{file_name}:{number}: indented line outside of a block")
            lines.append(stripped)
            continue
        _flush()
        parts = stripped.split(None, 1)
        key = parts[0].lower()
        lines = [parts[1].strip()] if len(parts) > 1 else []
    _flush()
    return fields


def _parse_version(file_name: str, value: Optional[str]) -> Optional[SemVer]:
    text = _single_line(value)
    if text is None:
        return None
    try:
        return SemVer.parse(text)
    except MalformedVersionError as exc:
        raise TemplateFileError(f"{file_name}: {exc}") from exc


def _dependency_lines(value: Optional[str]) -> Tuple[Tuple[str, str], ...]:
    if not value:
        return ()
    lines: List[Tuple[str, str]] = []
    for line in value.splitlines():
        parts = line.split(None, 1)
        lines.append((parts[0], parts[1].strip() if len(parts) > 1 else ""))
    return tuple(lines)


def _parse_files(value: Optional[str]) -> Tuple[FileMapping, ...]:
    if not value:
        return ()
    files: List[FileMapping] = []
    for line in value.splitlines():
        source, separator, target = line.partition("==>")
        files.append((source.strip(), target.strip() if separator else DEFAULT_FILE_TARGET))
    return tuple(files)


def _single_line(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = " ".join(value.split())
    return text or None


def _split_list(value: Optional[str]) -> Optional[Tuple[str, ...]]:
    text = _single_line(value)
    if text is None:
        return None
    return tuple(item.strip() for item in text.split(","))


def _split_tags(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(tag for tag in value.replace(",", " ").split() if tag)


__all__ = [
    "CURRENT_VERSION",
    "TEMPLATE_FILE_NAME",
    "load_template",
    "parse_template",
    "resolve_dependencies",
]
