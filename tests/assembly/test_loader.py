"""Tests for the dnfile-backed assembly reader.

Most cases drive it with in-memory metadata tables; the end-to-end cases read
a small compiled assembly built from tests/_fixtures/assemblies/src.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from types import SimpleNamespace

import pytest

from packmeta.assembly.attributes import (
    AssemblyCompanyAttribute,
    AssemblyDescriptionAttribute,
    AssemblyInformationalVersionAttribute,
    AssemblyTitleAttribute,
    CustomAttribute,
)
from packmeta.assembly.loader import DnfileAssemblyLoader, DotNetAssembly
from packmeta.errors import AssemblyLoadError, AttributeEnumerationError


def _string_blob(text: str) -> bytes:
    payload = text.encode("utf-8")
    return b"\x01\x00" + bytes([len(payload)]) + payload + b"\x00\x00"


def _attribute(type_name: str, blob: bytes, *, namespace: str = "System.Reflection", parent: str = "Assembly"):
    type_ref = SimpleNamespace(table="TypeRef", row=SimpleNamespace(TypeNamespace=namespace, TypeName=type_name))
    constructor = SimpleNamespace(table="MemberRef", row=SimpleNamespace(Class=type_ref))
    return SimpleNamespace(Parent=SimpleNamespace(table=parent), Type=constructor, Value=blob)


def _image(attributes=(), *, public_key: bytes = b"", **manifest):
    row = SimpleNamespace(
        Name=manifest.get("name", "Acme.Core"),
        MajorVersion=manifest.get("major", 1),
        MinorVersion=manifest.get("minor", 2),
        BuildNumber=manifest.get("build", 3),
        RevisionNumber=manifest.get("revision", 0),
        Culture="",
        PublicKey=public_key,
    )
    tables = SimpleNamespace(
        Assembly=SimpleNamespace(rows=[row]),
        CustomAttribute=SimpleNamespace(rows=list(attributes)),
    )
    return SimpleNamespace(net=SimpleNamespace(mdtables=tables))


def test_name_and_version_come_from_the_manifest() -> None:
    assembly = DotNetAssembly(_image())

    name = assembly.get_name()

    assert name.name == "Acme.Core"
    assert name.version == "1.2.3.0"
    assert assembly.full_name == "Acme.Core, Version=1.2.3.0, Culture=neutral, PublicKeyToken=null"


def test_full_name_includes_public_key_token() -> None:
    key = b"\x00\x24\x00\x00key-material"
    expected = hashlib.sha1(key).digest()[-8:][::-1].hex()

    assembly = DotNetAssembly(_image(public_key=key))

    assert assembly.full_name.endswith(f"PublicKeyToken={expected}")


def test_known_attributes_are_decoded_and_others_kept_raw() -> None:
    image = _image(
        [
            _attribute("AssemblyTitleAttribute", _string_blob("Core")),
            _attribute("AssemblyCompanyAttribute", _string_blob("Acme, Globex")),
            _attribute("GuidAttribute", b"\x01\x00\x00", namespace="System.Runtime.InteropServices"),
            _attribute("AssemblyTitleAttribute", _string_blob("module"), parent="Module"),
        ]
    )

    attributes = DotNetAssembly(image).get_custom_attributes(True)

    assert attributes == [
        AssemblyTitleAttribute("Core"),
        AssemblyCompanyAttribute("Acme, Globex"),
        CustomAttribute("System.Runtime.InteropServices.GuidAttribute", b"\x01\x00\x00"),
    ]


def test_null_string_argument_decodes_to_none() -> None:
    image = _image([_attribute("AssemblyTitleAttribute", b"\x01\x00\xff\x00\x00")])

    assert DotNetAssembly(image).get_custom_attributes(True) == [AssemblyTitleAttribute(None)]


def test_undecodable_attribute_fails_strict_enumeration() -> None:
    image = _image(
        [
            _attribute("AssemblyTitleAttribute", b"\x02\x00"),
            _attribute("AssemblyCompanyAttribute", _string_blob("Acme")),
        ]
    )
    assembly = DotNetAssembly(image)

    with pytest.raises(AttributeEnumerationError):
        assembly.get_custom_attributes(True)

    assert assembly.get_custom_attributes(False) == [AssemblyCompanyAttribute("Acme")]


def test_unresolvable_constructor_fails_strict_enumeration() -> None:
    broken = SimpleNamespace(
        Parent=SimpleNamespace(table="Assembly"),
        Type=SimpleNamespace(table="MemberRef", row=None),
        Value=b"",
    )
    assembly = DotNetAssembly(_image([broken]))

    with pytest.raises(AttributeEnumerationError):
        assembly.get_custom_attributes(True)
    assert assembly.get_custom_attributes(False) == []


def test_image_without_manifest_is_rejected() -> None:
    tables = SimpleNamespace(Assembly=SimpleNamespace(rows=[]))
    with pytest.raises(AssemblyLoadError):
        DotNetAssembly(SimpleNamespace(net=SimpleNamespace(mdtables=tables)))

    with pytest.raises(AssemblyLoadError):
        DotNetAssembly(SimpleNamespace(net=None))


def test_loader_rejects_bytes_that_are_not_an_image() -> None:
    with pytest.raises(AssemblyLoadError):
        DnfileAssemblyLoader().load(b"not a portable executable")


_FIXTURE_ASSEMBLY = Path(__file__).resolve().parents[1] / "_fixtures" / "assemblies" / "Acme.Fixture.dll"


def test_reads_a_compiled_assembly() -> None:
    assembly = DnfileAssemblyLoader().load(_FIXTURE_ASSEMBLY.read_bytes())

    name = assembly.get_name()
    assert (name.name, name.version) == ("Acme.Fixture", "1.2.3.4")
    assert assembly.full_name == "Acme.Fixture, Version=1.2.3.4, Culture=neutral, PublicKeyToken=null"

    attributes = assembly.get_custom_attributes(True)
    for expected in (
        AssemblyTitleAttribute("Acme Fixture"),
        AssemblyDescriptionAttribute("Assembly used to test metadata extraction."),
        AssemblyCompanyAttribute("Acme, Globex"),
        AssemblyInformationalVersionAttribute("1.2.3-beta1"),
    ):
        assert expected in attributes
    other = [attribute.type_name for attribute in attributes if isinstance(attribute, CustomAttribute)]
    assert "System.Runtime.Versioning.TargetFrameworkAttribute" in other
    # The marker attribute is declared in the assembly itself.
    assert "" in other
    assert assembly.get_custom_attributes(False) == attributes
