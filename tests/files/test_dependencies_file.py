from __future__ import annotations

import pytest

from packmeta.errors import DependenciesFileError
from packmeta.files.dependencies_file import DependenciesFile
from packmeta.versioning import PRERELEASE_ALL, RangeKind, VersionRequirement

_TEXT = """
source https://api.nuget.org/v3/index.json

nuget Newtonsoft.Json ~> 9.0
nuget FSharp.Core >= 4.0 framework: net45
nuget Argu
nuget xunit >= 2.0 prerelease

group Build
    source https://api.nuget.org/v3/index.json
    nuget FAKE 4.0
"""


def test_parses_main_group_requirements() -> None:
    dependencies = DependenciesFile.from_text("paket.dependencies", _TEXT)

    assert set(dependencies.direct_dependencies) == {"Newtonsoft.Json", "FSharp.Core", "Argu", "xunit"}
    assert dependencies.get_requirement("Newtonsoft.Json").format_nuget() == "[9.0.0,10.0.0)"
    assert dependencies.get_requirement("FSharp.Core").range.kind is RangeKind.MINIMUM
    assert dependencies.get_requirement("Argu") == VersionRequirement.all_releases()
    assert dependencies.get_requirement("xunit").prerelease == PRERELEASE_ALL


def test_lookup_is_case_insensitive_and_main_group_only() -> None:
    dependencies = DependenciesFile.from_text("paket.dependencies", _TEXT)

    assert dependencies.get_requirement("newtonsoft.json") is not None
    assert dependencies.get_requirement("FAKE") is None
    assert dependencies.groups["Build"]["FAKE"].format_nuget() == "4.0.0"


@pytest.mark.parametrize("text", ["nuget\n", "nuget Broken >= nope\n"])
def test_malformed_lines_report_their_location(text: str) -> None:
    with pytest.raises(DependenciesFileError, match=r"paket\.dependencies:1"):
        DependenciesFile.from_text("paket.dependencies", text)


def test_locate_walks_up_to_the_solution_root(solution) -> None:
    solution.write({"paket.dependencies": "nuget Argu\n"})
    project = solution.project("Lib")

    assert DependenciesFile.locate(project) == (solution.path() / "paket.dependencies").resolve()
    loaded = DependenciesFile.from_file(DependenciesFile.locate(project.parent))
    assert "Argu" in loaded.direct_dependencies


def test_locate_returns_none_without_a_file(tmp_path) -> None:
    assert DependenciesFile.locate(tmp_path) is None
