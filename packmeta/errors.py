"""Exception hierarchy for pack metadata computation."""

from __future__ import annotations


class PackError(RuntimeError):
    """Base class for failures that abort a pack run."""


class MalformedVersionError(PackError, ValueError):
    """Raised when a version string cannot be parsed as a semantic version."""


class AttributeEnumerationError(PackError):
    """Raised when the custom attributes of a loaded assembly cannot be enumerated."""


class AssemblyLoadError(PackError):
    """Raised when a compiled assembly cannot be read as a .NET image."""


class InvalidMutationTargetError(PackError):
    """Raised when a template without complete metadata is mutated."""


class UnresolvableReferenceError(PackError):
    """Raised when a project or package reference cannot be resolved."""


class IncompleteTemplateError(PackError):
    """Raised when a template still lacks mandatory metadata after merging."""


class ProjectFileError(PackError):
    """Raised when a project file cannot be interpreted."""


class TemplateFileError(PackError):
    """Raised when a template file is malformed."""


class DependenciesFileError(PackError):
    """Raised when a dependencies file is malformed."""


__all__ = [
    "AssemblyLoadError",
    "AttributeEnumerationError",
    "DependenciesFileError",
    "IncompleteTemplateError",
    "InvalidMutationTargetError",
    "MalformedVersionError",
    "PackError",
    "ProjectFileError",
    "TemplateFileError",
    "UnresolvableReferenceError",
]
