"""Pack-run orchestration: from templates on disk to resolved package manifests."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from fnmatch import fnmatchcase
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .assembly.loader import AssemblyLoader, DnfileAssemblyLoader
from .assembly.metadata import Valid, load_assembly_metadata, validate
from .config import PackConfig, load_config
from .errors import IncompleteTemplateError, PackError, TemplateFileError
from .files.dependencies_file import DEPENDENCIES_FILE_NAME, DependenciesFile
from .files.project_file import PROJECT_FILE_SUFFIXES, ProjectFile
from .files.template_file import TEMPLATE_FILE_NAME, load_template, resolve_dependencies
from .logging import get_logger
from .models import CompleteInfo, ProjectCoreInfo, ProjectInfo, TemplateFile
from .resolution import find_dependencies
from .versioning import SemVer

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".vs",
    ".paket",
    "bin",
    "obj",
    "packages",
    "node_modules",
}


@dataclass
class PackResult:
    """Manifests computed by a pack run."""

    root: Path
    build_config: str
    templates: List[TemplateFile]


class Packer:
    """Computes the manifest of every package templated under a solution root."""

    def __init__(self, loader: AssemblyLoader | None = None) -> None:
        self.loader = loader or DnfileAssemblyLoader()
        self.logger = get_logger("packer")

    def collect(
        self,
        path: str | Path,
        *,
        build_config: str | None = None,
        version: str | None = None,
        config: PackConfig | None = None,
    ) -> PackResult:
        """Resolve all templates below ``path``.

        ``version`` overrides the version of every project template.
        """
        root = Path(path).expanduser().resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Solution directory not found: {root}")
        config = config or load_config(root)
        build = build_config or config.build_config
        version_override = SemVer.parse(version) if version else None
        self.logger.info("Collecting package templates under %s (%s)", root, build)

        dependencies = self._load_dependencies(root, config)
        template_paths = find_template_files(root, config.exclude_paths)
        self.logger.debug("Found %d template files", len(template_paths))

        project_templates: List[Tuple[TemplateFile, ProjectFile]] = []
        file_templates: List[TemplateFile] = []
        for template_path in template_paths:
            template = load_template(template_path)
            contents = template.contents
            if isinstance(contents, ProjectInfo):
                project = _project_for_template(template_path)
                completed = self._complete(
                    template.file_name, contents, project, build, version_override
                )
                project_templates.append((completed, project))
            else:
                file_templates.append(template)

        project_map: Dict[str, Tuple[TemplateFile, ProjectFile]] = {}
        for template, project in project_templates:
            if project.name in project_map:
                raise PackError(f"Project {project.file_name} has more than one template")
            project_map[project.name] = (template, project)
        frozen_map = MappingProxyType(project_map)

        resolved = [
            find_dependencies(dependencies, build, template, project, frozen_map)
            for template, project in project_templates
        ]
        for template in resolved:
            self.logger.info("Resolved %s", template.file_name)
        return PackResult(root=root, build_config=build, templates=resolved + file_templates)

    def _complete(
        self,
        file_name: str,
        contents: ProjectInfo,
        project: ProjectFile,
        build_config: str,
        version_override: Optional[SemVer],
    ) -> TemplateFile:
        core = contents.core
        if version_override is not None:
            core = replace(core, version=version_override)

        outcome = validate(core)
        if not isinstance(outcome, Valid):
            from_assembly = load_assembly_metadata(build_config, project, self.loader)
            core = _merge_core(core, from_assembly)
            outcome = validate(core)
        if not isinstance(outcome, Valid):
            missing = ", ".join(core.missing_fields())
            raise IncompleteTemplateError(
                f"Incomplete mandatory metadata in template file {file_name} "
                f"(even including assembly attributes). Missing: {missing}"
            )
        optional = contents.optional
        for dependency in resolve_dependencies(
            file_name, contents.current_version_dependencies, outcome.info.version
        ):
            optional = optional.with_dependency(dependency)
        return TemplateFile(file_name, CompleteInfo(outcome.info, optional))

    def _load_dependencies(self, root: Path, config: PackConfig) -> DependenciesFile:
        path = config.dependencies_file or DependenciesFile.locate(root)
        if path is None or not Path(path).is_file():
            self.logger.debug("No %s found for %s", DEPENDENCIES_FILE_NAME, root)
            return DependenciesFile(file_name=str(root / DEPENDENCIES_FILE_NAME))
        return DependenciesFile.from_file(path)


def find_template_files(root: Path, exclude_paths: Sequence[str] = ()) -> List[Path]:
    """Return template files below ``root`` in a stable order."""
    found: List[Path] = []
    for current, dirnames, filenames in os.walk(root):
        rel_dir = Path(current).relative_to(root).as_posix()
        dirnames[:] = sorted(
            name
            for name in dirnames
            if name not in _EXCLUDED_DIRS
            and not _is_excluded(_join(rel_dir, name), exclude_paths)
        )
        for name in sorted(filenames):
            if not _is_template_name(name):
                continue
            if _is_excluded(_join(rel_dir, name), exclude_paths):
                continue
            found.append(Path(current) / name)
    return found


def manifest_to_dict(template: TemplateFile) -> Dict[str, Any]:
    """Return a JSON-serialisable view of a template."""
    contents = template.contents
    optional = contents.optional
    payload: Dict[str, Any] = {
        "template": template.file_name,
        "complete": template.is_complete,
        "id": contents.core.id,
        "version": str(contents.core.version) if contents.core.version is not None else None,
        "authors": list(contents.core.authors or ()),
        "description": contents.core.description,
        "dependencies": [
            {"id": name, "version": requirement.format_nuget()}
            for name, requirement in sorted(optional.dependencies, key=lambda item: item[0].lower())
        ],
        "files": [
            {"source": source, "target": target}
            for source, target in sorted(optional.files)
        ],
    }
    extras = {
        "title": optional.title,
        "owners": list(optional.owners),
        "summary": optional.summary,
        "tags": list(optional.tags),
        "projectUrl": optional.project_url,
        "licenseUrl": optional.license_url,
        "iconUrl": optional.icon_url,
        "releaseNotes": optional.release_notes,
        "copyright": optional.copyright,
    }
    payload.update({key: value for key, value in extras.items() if value})
    if optional.require_license_acceptance:
        payload["requireLicenseAcceptance"] = True
    return payload


def _project_for_template(template_path: Path) -> ProjectFile:
    directory = template_path.parent
    candidates = sorted(
        path for path in directory.iterdir() if path.is_file() and path.suffix in PROJECT_FILE_SUFFIXES
    )
    prefix = template_path.name[: -len(TEMPLATE_FILE_NAME)].rstrip(".")
    if prefix:
        candidates = [path for path in candidates if path.stem == prefix]
    if len(candidates) != 1:
        raise TemplateFileError(
            f"{template_path}: expected exactly one project file next to a project template, "
            f"found {len(candidates)}"
        )
    project = ProjectFile.load(candidates[0])
    if project is None:
        raise TemplateFileError(f"{template_path}: project file {candidates[0]} could not be loaded")
    return project


def _merge_core(primary: ProjectCoreInfo, fallback: ProjectCoreInfo) -> ProjectCoreInfo:
    return ProjectCoreInfo(
        id=primary.id if primary.id is not None else fallback.id,
        version=primary.version if primary.version is not None else fallback.version,
        authors=primary.authors if primary.authors is not None else fallback.authors,
        description=primary.description if primary.description is not None else fallback.description,
    )


def _is_template_name(name: str) -> bool:
    return name == TEMPLATE_FILE_NAME or name.endswith(f".{TEMPLATE_FILE_NAME}")


def _is_excluded(rel_path: str, patterns: Sequence[str]) -> bool:
    for pattern in patterns:
        cleaned = pattern.strip().rstrip("/")
        if not cleaned:
            continue
        if fnmatchcase(rel_path, cleaned) or rel_path.startswith(f"{cleaned}/"):
            return True
    return False


def _join(rel_dir: str, name: str) -> str:
    return name if rel_dir in ("", ".") else f"{rel_dir}/{name}"


__all__ = ["PackResult", "Packer", "find_template_files", "manifest_to_dict"]
