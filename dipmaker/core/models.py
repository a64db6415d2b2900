"""Data structures shared across the packaging pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Container:
    """A labelled physical holder referenced by a description unit."""

    label: str
    container_type: str = ""
    type_label: str = ""
    id: Optional[str] = None
    parent: Optional[str] = None


@dataclass
class Component:
    """One unit of description from the finding aid."""

    id: Optional[str]
    containers: List[Container]
    title: Optional[str] = None
    date: Optional[str] = None
    level: Optional[str] = None
    element: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class ArchivalPath:
    """Rendered container tokens rooted at a base identifier."""

    base: str
    tokens: Tuple[str, ...]

    @property
    def relative(self) -> str:
        return "/".join(self.tokens)

    def __str__(self) -> str:
        return "/".join((self.base,) + self.tokens)


@dataclass(frozen=True)
class Job:
    """Derivative-generation work order handed to an external worker."""

    id: str
    item: str
    item_base: str
    command: str
    source: str
    target: str
    mime_type: str
    use: str
    page_count: Optional[int] = None
    ocr_required: Optional[bool] = None

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {
            "id": self.id,
            "item": self.item,
            "item_base": self.item_base,
            "command": self.command,
            "source": self.source,
            "target": self.target,
            "mime_type": self.mime_type,
            "use": self.use,
        }
        if self.page_count is not None:
            wire["page_count"] = self.page_count
        if self.ocr_required is not None:
            wire["ocr_required"] = self.ocr_required
        return wire


@dataclass(frozen=True)
class StructuralEntry:
    section: int
    order: int
    file_id: str
    use: str
    mime_type: str
    relative_target: str


@dataclass(frozen=True)
class SourceFile:
    """A discovered file and its (normalized) MIME type."""

    path: Path
    mime_type: str
