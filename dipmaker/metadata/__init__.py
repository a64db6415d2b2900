"""Structural metadata synthesis."""

from .mets import METS_NS, StructuralTemplate
from .structure import FileEntry, Item, Section, StructureBuilder, file_id

__all__ = [
    "FileEntry",
    "Item",
    "METS_NS",
    "Section",
    "StructuralTemplate",
    "StructureBuilder",
    "file_id",
]
