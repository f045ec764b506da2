"""Per-project references file reader (``paket.references``)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

MAIN_GROUP = "Main"


@dataclass(frozen=True)
class PackageReference:
    """A package named in a references file."""

    name: str
    group: str = MAIN_GROUP


@dataclass
class ReferencesFile:
    """Packages a project declares it uses, by group."""

    file_name: str
    groups: Dict[str, List[PackageReference]] = field(default_factory=dict)

    @property
    def nuget_packages(self) -> List[PackageReference]:
        return list(self.groups.get(MAIN_GROUP, []))

    @classmethod
    def from_file(cls, path: Path | str) -> "ReferencesFile":
        source = Path(path)
        return cls.from_text(str(source), source.read_text(encoding="utf-8-sig"))

    @classmethod
    def from_text(cls, file_name: str, text: str) -> "ReferencesFile":
        references = cls(file_name=file_name)
        group = MAIN_GROUP
        for line in text.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith(("//", "#")):
                continue
            if stripped.lower().startswith("file:"):
                # Remote files are not packages.
                continue
            parts = stripped.split(None, 1)
            head = parts[0]
            if head.lower() == "group" and len(parts) > 1:
                group = _group_name(parts[1])
                continue
            references.groups.setdefault(group, []).append(PackageReference(name=head, group=group))
        return references


def _group_name(text: str) -> str:
    name = text.strip()
    return MAIN_GROUP if name.lower() == MAIN_GROUP.lower() else name


__all__ = ["MAIN_GROUP", "PackageReference", "ReferencesFile"]
