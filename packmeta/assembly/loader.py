"""Loading compiled .NET assemblies and enumerating their custom attributes."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Sequence

import dnfile

from ..errors import AssemblyLoadError, AttributeEnumerationError
from ..logging import get_logger
from .attributes import (
    AssemblyCompanyAttribute,
    AssemblyDescriptionAttribute,
    AssemblyInformationalVersionAttribute,
    AssemblyTitleAttribute,
    AssemblyVersionAttribute,
    CustomAttribute,
)

_REFLECTION_NAMESPACE = "System.Reflection"
_ATTRIBUTE_FACTORIES: Dict[str, Callable[[Optional[str]], object]] = {
    "AssemblyTitleAttribute": AssemblyTitleAttribute,
    "AssemblyDescriptionAttribute": AssemblyDescriptionAttribute,
    "AssemblyVersionAttribute": AssemblyVersionAttribute,
    "AssemblyInformationalVersionAttribute": AssemblyInformationalVersionAttribute,
    "AssemblyCompanyAttribute": AssemblyCompanyAttribute,
}

logger = get_logger("assembly.loader")


@dataclass(frozen=True)
class AssemblyName:
    """Simple name and declared version of an assembly."""

    name: str
    version: Optional[str]


class LoadedAssembly(Protocol):
    full_name: str

    def get_name(self) -> AssemblyName:
        ...

    def get_custom_attributes(self, inherit: bool) -> Sequence[object]:
        ...


class AssemblyLoader(Protocol):
    def load(self, data: bytes) -> LoadedAssembly:
        ...


class _AttributeDecodeError(ValueError):
    pass


class DotNetAssembly:
    """An assembly image read from bytes with dnfile."""

    def __init__(self, image: "dnfile.dnPE") -> None:
        net = getattr(image, "net", None)
        if net is None or getattr(net, "mdtables", None) is None:
            raise AssemblyLoadError("Image does not contain CLI metadata")
        self._tables = net.mdtables
        rows = self._rows("Assembly")
        if not rows:
            raise AssemblyLoadError("Image has no assembly manifest")
        self._manifest = rows[0]

    @classmethod
    def from_bytes(cls, data: bytes) -> "DotNetAssembly":
        try:
            image = dnfile.dnPE(data=data)
        except Exception as exc:
            raise AssemblyLoadError(f"Unable to read assembly image: {exc}") from exc
        return cls(image)

    def get_name(self) -> AssemblyName:
        row = self._manifest
        version = ".".join(
            str(getattr(row, part, 0) or 0)
            for part in ("MajorVersion", "MinorVersion", "BuildNumber", "RevisionNumber")
        )
        return AssemblyName(name=_text(row.Name), version=version)

    @property
    def full_name(self) -> str:
        name = self.get_name()
        culture = _text(getattr(self._manifest, "Culture", None)) or "neutral"
        return f"{name.name}, Version={name.version}, Culture={culture}, PublicKeyToken={self._public_key_token()}"

    def get_custom_attributes(self, inherit: bool) -> List[object]:
        """Return the assembly-level attributes.

        With ``inherit`` every attribute constructor must resolve and every known
        attribute blob must decode; the first failure raises
        :class:`AttributeEnumerationError`. Without it, attributes that cannot be
        decoded are skipped.
        """
        attributes: List[object] = []
        for row in self._rows("CustomAttribute"):
            if _table_name(getattr(row, "Parent", None)) != "Assembly":
                continue
            try:
                attributes.append(self._decode(row))
            except _AttributeDecodeError as exc:
                if inherit:
                    raise AttributeEnumerationError(str(exc)) from exc
                logger.debug("Skipping attribute that could not be decoded: %s", exc)
        return attributes

    def _decode(self, row) -> object:
        constructor = getattr(row, "Type", None)
        table = _table_name(constructor)
        constructor_row = getattr(constructor, "row", None)
        if constructor_row is None:
            raise _AttributeDecodeError("attribute constructor cannot be resolved")
        if table != "MemberRef":
            # Constructors defined in this assembly belong to its own attribute types.
            return CustomAttribute(type_name="", value=_blob(row.Value))

        parent = getattr(constructor_row, "Class", None)
        type_row = getattr(parent, "row", None)
        if _table_name(parent) != "TypeRef" or type_row is None:
            raise _AttributeDecodeError("attribute type cannot be resolved")
        namespace = _text(type_row.TypeNamespace)
        type_name = _text(type_row.TypeName)
        blob = _blob(row.Value)

        factory = _ATTRIBUTE_FACTORIES.get(type_name) if namespace == _REFLECTION_NAMESPACE else None
        if factory is None:
            return CustomAttribute(type_name=f"{namespace}.{type_name}", value=blob)
        return factory(_read_string_argument(type_name, blob))

    def _rows(self, table_name: str) -> Sequence[object]:
        table = getattr(self._tables, table_name, None)
        if table is None:
            return []
        return getattr(table, "rows", None) or []

    def _public_key_token(self) -> str:
        public_key = _blob(getattr(self._manifest, "PublicKey", None))
        if not public_key:
            return "null"
        return hashlib.sha1(public_key).digest()[-8:][::-1].hex()


class DnfileAssemblyLoader:
    """Default :class:`AssemblyLoader` backed by dnfile."""

    def load(self, data: bytes) -> DotNetAssembly:
        return DotNetAssembly.from_bytes(data)


def _read_string_argument(type_name: str, blob: bytes) -> Optional[str]:
    # Custom attribute blob: 0x0001 prolog, then the SerString constructor argument.
    if len(blob) < 3 or blob[0] != 0x01 or blob[1] != 0x00:
        raise _AttributeDecodeError(f"{type_name} has a malformed value blob")
    if blob[2] == 0xFF:
        return None
    length, position = _read_compressed_length(type_name, blob, 2)
    end = position + length
    if end > len(blob):
        raise _AttributeDecodeError(f"{type_name} string argument is truncated")
    try:
        return blob[position:end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise _AttributeDecodeError(f"{type_name} string argument is not UTF-8") from exc


def _read_compressed_length(type_name: str, data: bytes, position: int) -> tuple[int, int]:
    first = data[position]
    if first & 0x80 == 0:
        return first, position + 1
    if first & 0xC0 == 0x80 and position + 1 < len(data):
        return ((first & 0x3F) << 8) | data[position + 1], position + 2
    if first & 0xE0 == 0xC0 and position + 3 < len(data):
        value = (
            ((first & 0x1F) << 24)
            | (data[position + 1] << 16)
            | (data[position + 2] << 8)
            | data[position + 3]
        )
        return value, position + 4
    raise _AttributeDecodeError(f"{type_name} has an invalid string length prefix")


def _text(value: object) -> str:
    value = getattr(value, "value", value)
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return str(value)


def _blob(value: object) -> bytes:
    value = getattr(value, "value", value)
    if value is None:
        return b""
    return bytes(value)


def _table_name(index: object) -> Optional[str]:
    table = getattr(index, "table", None)
    if table is None or isinstance(table, str):
        return table
    return getattr(table, "name", None)


__all__ = [
    "AssemblyLoader",
    "AssemblyName",
    "DnfileAssemblyLoader",
    "DotNetAssembly",
    "LoadedAssembly",
]
