from __future__ import annotations

from packmeta.files.references_file import MAIN_GROUP, ReferencesFile


def test_main_group_packages_in_order() -> None:
    references = ReferencesFile.from_text(
        "paket.references",
        """
        // comment
        Newtonsoft.Json
        FSharp.Core copy_local: false

        # another comment
        File: Helpers.fs Shared
        """,
    )

    assert [package.name for package in references.nuget_packages] == ["Newtonsoft.Json", "FSharp.Core"]
    assert all(package.group == MAIN_GROUP for package in references.nuget_packages)
    assert list(references.groups) == [MAIN_GROUP]


def test_packages_after_a_group_header_are_not_main() -> None:
    references = ReferencesFile.from_text(
        "paket.references",
        "Argu\ngroup Build\nFAKE\ngroup main\nNUnit\n",
    )

    assert [package.name for package in references.nuget_packages] == ["Argu", "NUnit"]
    assert [package.name for package in references.groups["Build"]] == ["FAKE"]


def test_from_file(solution) -> None:
    solution.write({"Lib/paket.references": "Serilog\n"})
    path = solution.path() / "Lib" / "paket.references"

    references = ReferencesFile.from_file(path)

    assert references.file_name == str(path)
    assert [package.name for package in references.nuget_packages] == ["Serilog"]
