"""MSBuild project file reader."""

from __future__ import annotations

import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..errors import ProjectFileError
from ..logging import get_logger

REFERENCES_FILE_NAME = "paket.references"
PROJECT_FILE_SUFFIXES = (".csproj", ".fsproj", ".vbproj")

_CONDITION_PATTERN = re.compile(r"==\s*'\s*([^'|]*)")
_FRAMEWORK_VERSION_PATTERN = re.compile(r"^v?(\d+(?:\.\d+)*)$")

logger = get_logger("files.project")


class OutputType(Enum):
    EXE = "Exe"
    LIBRARY = "Library"


@dataclass(frozen=True)
class ProjectReference:
    """An inter-project reference as declared by a ``ProjectReference`` item."""

    name: str
    path: str


class ProjectFile:
    """Read-only view of the parts of an MSBuild project that packing needs."""

    def __init__(self, file_name: Path, document: ET.Element) -> None:
        self.file_name = str(file_name)
        self._document = document
        self._namespace = _detect_xml_namespace(document)

    @classmethod
    def load(cls, path: Path | str) -> Optional["ProjectFile"]:
        """Return the parsed project, or ``None`` when it is missing or unreadable."""
        project_path = Path(path).resolve()
        if not project_path.is_file():
            logger.debug("Project file %s does not exist", project_path)
            return None
        try:
            return cls.parse(project_path, project_path.read_bytes())
        except (OSError, ProjectFileError) as exc:
            logger.warning("Unable to load project file %s: %s", project_path, exc)
            return None

    @classmethod
    def parse(cls, path: Path, content: bytes | str) -> "ProjectFile":
        """Parse project XML; byte input honours its BOM and encoding declaration."""
        try:
            document = ET.fromstring(content)
        except ET.ParseError as exc:
            raise ProjectFileError(f"{path} is not a valid MSBuild project: {exc}") from exc
        return cls(path, document)

    @staticmethod
    def find_references_file(path: Path | str) -> Optional[Path]:
        """Locate the references file that belongs to the project at ``path``."""
        project_path = Path(path)
        specific = project_path.parent / f"{project_path.name}.{REFERENCES_FILE_NAME}"
        if specific.is_file():
            return specific
        general = project_path.parent / REFERENCES_FILE_NAME
        if general.is_file():
            return general
        return None

    @property
    def name(self) -> str:
        return Path(self.file_name).stem

    @property
    def output_type(self) -> OutputType:
        value = self._first_text("OutputType")
        if value and value.strip().lower() in {"exe", "winexe"}:
            return OutputType.EXE
        return OutputType.LIBRARY

    def get_output_directory(self, build_config: str) -> str:
        """Return the output directory for ``build_config`` relative to the project."""
        fallback: Optional[str] = None
        for group in self._iter("PropertyGroup"):
            output_path = group.findtext(self._tag("OutputPath"))
            if not output_path or not output_path.strip():
                continue
            condition = group.get("Condition")
            if condition is None:
                fallback = fallback or output_path
                continue
            match = _CONDITION_PATTERN.search(condition)
            if match and match.group(1).strip().lower() == build_config.lower():
                return _normalize_separators(output_path)
        if fallback is not None:
            return _normalize_separators(fallback)
        return f"bin/{build_config}/"

    def get_assembly_name(self) -> str:
        assembly_name = self._first_text("AssemblyName") or self.name
        extension = "exe" if self.output_type is OutputType.EXE else "dll"
        return f"{assembly_name.strip()}.{extension}"

    def get_target_framework(self) -> str:
        framework = self._first_text("TargetFramework")
        if framework:
            return framework.strip()
        frameworks = self._first_text("TargetFrameworks")
        if frameworks:
            first = next((item.strip() for item in frameworks.split(";") if item.strip()), None)
            if first:
                return first
        version = self._first_text("TargetFrameworkVersion")
        if version:
            match = _FRAMEWORK_VERSION_PATTERN.match(version.strip())
            if match:
                return "net" + match.group(1).replace(".", "")
        raise ProjectFileError(f"Could not determine the target framework of {self.file_name}")

    def get_inter_project_dependencies(self) -> List[ProjectReference]:
        references: List[ProjectReference] = []
        for item in self._iter("ProjectReference"):
            include = item.get("Include")
            if not include:
                continue
            path = _normalize_separators(include)
            name = item.findtext(self._tag("Name"))
            if not name or not name.strip():
                name = Path(path).stem
            references.append(ProjectReference(name=name.strip(), path=path))
        return references

    def _tag(self, name: str) -> str:
        return f"{{{self._namespace}}}{name}" if self._namespace else name

    def _iter(self, name: str):
        return self._document.iter(self._tag(name))

    def _first_text(self, name: str) -> Optional[str]:
        for element in self._iter(name):
            if element.text and element.text.strip():
                return element.text
        return None

    def __repr__(self) -> str:
        return f"ProjectFile({self.file_name!r})"


def output_file_path(build_config: str, project: "ProjectFile") -> str:
    """Return the normalized path of the assembly ``project`` builds for ``build_config``."""
    directory = os.path.dirname(project.file_name)
    return os.path.normpath(
        os.path.join(directory, project.get_output_directory(build_config), project.get_assembly_name())
    )


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


def _normalize_separators(value: str) -> str:
    return value.strip().replace("\\", "/")


__all__ = [
    "OutputType",
    "PROJECT_FILE_SUFFIXES",
    "ProjectFile",
    "ProjectReference",
    "REFERENCES_FILE_NAME",
    "output_file_path",
]
