"""Template mutation and the project reference walk that fills a package's contents.

For every project being packed, its own assembly is added to the package.
Referenced projects that are packed in the same run become versioned
dependencies; referenced projects that are not have their assemblies merged
into this package instead. Package references declared in the project's
references file are added as dependencies with the requirement from the
dependencies file.
"""

from __future__ import annotations

import os
from dataclasses import replace
from typing import List, Mapping, Tuple

from .errors import InvalidMutationTargetError, UnresolvableReferenceError
from .files.dependencies_file import DependenciesFile
from .files.project_file import OutputType, ProjectFile, output_file_path
from .files.references_file import ReferencesFile
from .logging import get_logger
from .models import CompleteInfo, Dependency, TemplateFile
from .versioning import PRERELEASE_ALL, VersionRange, VersionRequirement

ProjectMap = Mapping[str, Tuple[TemplateFile, ProjectFile]]

logger = get_logger("resolution")


def add_dependency(template: TemplateFile, dependency: Dependency) -> TemplateFile:
    contents = template.contents
    if not isinstance(contents, CompleteInfo):
        raise InvalidMutationTargetError(
            "You should only try and add dependencies to template files with complete metadata."
        )
    optional = contents.optional.with_dependency(dependency)
    return replace(template, contents=CompleteInfo(contents.core, optional))


def add_file(source: str, dest: str, template: TemplateFile) -> TemplateFile:
    contents = template.contents
    if not isinstance(contents, CompleteInfo):
        raise InvalidMutationTargetError(
            "You should only try and add files to template files with complete metadata."
        )
    optional = contents.optional.with_file((source, dest))
    return replace(template, contents=CompleteInfo(contents.core, optional))


def target_directory(project: ProjectFile) -> str:
    if project.output_type is OutputType.EXE:
        return "tools/"
    return f"lib/{project.get_target_framework()}/"


def find_dependencies(
    dependencies: DependenciesFile,
    build_config: str,
    template: TemplateFile,
    project: ProjectFile,
    project_map: ProjectMap,
) -> TemplateFile:
    """Fold this project's files and dependencies into ``template``.

    Any unresolvable reference raises; no partially resolved template is returned.
    """
    target_dir = target_directory(project)
    project_dir = os.path.dirname(project.file_name)

    packaged: List[Tuple[TemplateFile, ProjectFile]] = []
    unpackaged: List[ProjectFile] = []
    for reference in project.get_inter_project_dependencies():
        sibling = project_map.get(reference.name)
        if sibling is not None:
            packaged.append(sibling)
            continue
        loaded = ProjectFile.load(os.path.join(project_dir, reference.path))
        if loaded is None:
            raise UnresolvableReferenceError(
                f"Missing project reference in proj file {reference.path}"
            )
        unpackaged.append(loaded)

    result = add_file(output_file_path(build_config, project), target_dir, template)

    for sibling_template, _ in packaged:
        result = add_dependency(result, _sibling_dependency(sibling_template))

    for referenced in unpackaged:
        logger.debug("Including output of %s in %s", referenced.file_name, template.file_name)
        result = add_file(output_file_path(build_config, referenced), target_dir, result)

    references_path = ProjectFile.find_references_file(project.file_name)
    if references_path is not None:
        references = ReferencesFile.from_file(references_path)
        for package in references.nuget_packages:
            requirement = dependencies.get_requirement(package.name)
            if requirement is None:
                raise UnresolvableReferenceError(
                    f"{package.name} is referenced in {references_path} "
                    f"but missing from {dependencies.file_name}"
                )
            result = add_dependency(result, (package.name, requirement))

    return result


def _sibling_dependency(sibling: TemplateFile) -> Dependency:
    contents = sibling.contents
    if not isinstance(contents, CompleteInfo):
        raise UnresolvableReferenceError(
            f"You cannot create a dependency on a template file ({sibling.file_name}) with incomplete metadata."
        )
    version = contents.core.version
    if version is None:
        raise UnresolvableReferenceError(f"There was no version given for {sibling.file_name}.")
    return contents.core.id, VersionRequirement(VersionRange.minimum(version), PRERELEASE_ALL)


__all__ = [
    "ProjectMap",
    "add_dependency",
    "add_file",
    "find_dependencies",
    "target_directory",
]
