"""Test doubles for assembly loading."""

from __future__ import annotations

from typing import List, Optional, Sequence

from packmeta.assembly.loader import AssemblyName
from packmeta.errors import AttributeEnumerationError


class FakeAssembly:
    """Loaded assembly double that records how attributes were enumerated."""

    def __init__(
        self,
        name: str = "Lib",
        version: Optional[str] = "1.0.0.0",
        attributes: Sequence[object] = (),
        *,
        fail_inherited: bool = False,
        fail_always: bool = False,
    ) -> None:
        self._name = name
        self._version = version
        self._attributes = list(attributes)
        self._fail_inherited = fail_inherited
        self._fail_always = fail_always
        self.full_name = f"{name}, Version={version}, Culture=neutral, PublicKeyToken=null"
        self.inherit_calls: List[bool] = []

    def get_name(self) -> AssemblyName:
        return AssemblyName(name=self._name, version=self._version)

    def get_custom_attributes(self, inherit: bool) -> List[object]:
        self.inherit_calls.append(inherit)
        if self._fail_always or (inherit and self._fail_inherited):
            raise AttributeEnumerationError("Could not load type 'Acme.SomeAttribute'")
        return list(self._attributes)


class RecordingLoader:
    """Loader double that hands out prepared assemblies by simple name order."""

    def __init__(self, *assemblies: FakeAssembly) -> None:
        self._assemblies = list(assemblies)
        self.loaded: List[bytes] = []

    def load(self, data: bytes) -> FakeAssembly:
        self.loaded.append(data)
        if not self._assemblies:
            raise AssertionError("No prepared assembly left to load")
        return self._assemblies.pop(0)


__all__ = ["FakeAssembly", "RecordingLoader"]
