"""Readers for the project, references, dependencies and template files of a solution."""

from .dependencies_file import DEPENDENCIES_FILE_NAME, DependenciesFile
from .project_file import OutputType, ProjectFile, ProjectReference, output_file_path
from .references_file import PackageReference, ReferencesFile
from .template_file import TEMPLATE_FILE_NAME, load_template, parse_template

__all__ = [
    "DEPENDENCIES_FILE_NAME",
    "DependenciesFile",
    "OutputType",
    "PackageReference",
    "ProjectFile",
    "ProjectReference",
    "ReferencesFile",
    "TEMPLATE_FILE_NAME",
    "load_template",
    "output_file_path",
    "parse_template",
]
