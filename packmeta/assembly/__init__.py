"""Assembly loading and core metadata extraction."""

from .attributes import MetadataAttribute, classify
from .loader import AssemblyLoader, AssemblyName, DnfileAssemblyLoader, LoadedAssembly
from .metadata import Invalid, Valid, extract, load_assembly_metadata, validate

__all__ = [
    "AssemblyLoader",
    "AssemblyName",
    "DnfileAssemblyLoader",
    "Invalid",
    "LoadedAssembly",
    "MetadataAttribute",
    "Valid",
    "classify",
    "extract",
    "load_assembly_metadata",
    "validate",
]
