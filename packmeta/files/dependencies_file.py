"""Solution-level dependencies file reader (``paket.dependencies``)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import DependenciesFileError, MalformedVersionError
from ..logging import get_logger
from ..versioning import VersionRequirement, parse_version_requirement
from .references_file import MAIN_GROUP

DEPENDENCIES_FILE_NAME = "paket.dependencies"

logger = get_logger("files.dependencies")


@dataclass
class DependenciesFile:
    """Direct package dependencies declared for the whole solution."""

    file_name: str
    groups: Dict[str, Dict[str, VersionRequirement]] = field(default_factory=dict)
    _names: Dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def direct_dependencies(self) -> Dict[str, VersionRequirement]:
        """Main-group packages keyed by their declared name."""
        return dict(self.groups.get(MAIN_GROUP, {}))

    def get_requirement(self, package_name: str) -> Optional[VersionRequirement]:
        """Look up a main-group requirement; package names compare case-insensitively."""
        declared = self._names.get(package_name.lower())
        if declared is None:
            return None
        return self.groups[MAIN_GROUP].get(declared)

    @classmethod
    def from_file(cls, path: Path | str) -> "DependenciesFile":
        source = Path(path)
        logger.debug("Reading dependencies file %s", source)
        return cls.from_text(str(source), source.read_text(encoding="utf-8-sig"))

    @classmethod
    def from_text(cls, file_name: str, text: str) -> "DependenciesFile":
        dependencies = cls(file_name=file_name)
        group = MAIN_GROUP
        for number, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith(("//", "#")):
                continue
            parts = stripped.split()
            keyword = parts[0].lower()
            if keyword == "group" and len(parts) > 1:
                name = " ".join(parts[1:])
                group = MAIN_GROUP if name.lower() == MAIN_GROUP.lower() else name
                continue
            # Option lines do not affect requirements.
            if keyword != "nuget":
                continue
            if len(parts) < 2:
                raise DependenciesFileError(f"{file_name}:{number}: 'nuget' requires a package name")
            package = parts[1]
            requirement_text = " ".join(_strip_options(parts[2:]))
            try:
                requirement = parse_version_requirement(requirement_text)
            except MalformedVersionError as exc:
                raise DependenciesFileError(f"{file_name}:{number}: {exc}") from exc
            dependencies._add(group, package, requirement)
        return dependencies

    @classmethod
    def locate(cls, start: Path | str) -> Optional[Path]:
        """Walk up from ``start`` to the nearest directory holding a dependencies file."""
        current = Path(start).resolve()
        if current.is_file():
            current = current.parent
        for directory in (current, *current.parents):
            candidate = directory / DEPENDENCIES_FILE_NAME
            if candidate.is_file():
                return candidate
        return None

    def _add(self, group: str, package: str, requirement: VersionRequirement) -> None:
        self.groups.setdefault(group, {})[package] = requirement
        if group == MAIN_GROUP:
            self._names[package.lower()] = package


def _strip_options(tokens: List[str]) -> List[str]:
    # Options such as "framework: net45" follow the version requirement.
    for index, token in enumerate(tokens):
        if ":" in token:
            return tokens[:index]
    return tokens


__all__ = ["DEPENDENCIES_FILE_NAME", "DependenciesFile"]
