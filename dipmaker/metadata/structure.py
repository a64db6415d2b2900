"""Sections, items and file entries of the output structural map.

Section numbers and item orders are assigned as paths are discovered, starting
at 1. File ids are derived from the target path, so rebuilding the map from the
same jobs yields the same ids.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from dipmaker.config.settings import DEFAULT_IMAGE_ITEM_LABEL
from dipmaker.core.logger import setup_logger
from dipmaker.core.models import ArchivalPath, Component, Job, StructuralEntry

logger = setup_logger(__name__)

DEFAULT_ITEM_TYPE = "item"


def file_id(use: str, relative_target: str) -> str:
    """`FrontThumbnailFile<md5>` for use "front thumbnail"."""
    words = "".join(word.capitalize() for word in use.split())
    digest = hashlib.md5(relative_target.encode("utf-8")).hexdigest()
    return f"{words}File{digest}"


@dataclass(frozen=True)
class FileEntry:
    file_id: str
    use: str
    mime_type: str
    relative_target: str


@dataclass
class Item:
    order: int
    key: str
    label: str
    type: str = DEFAULT_ITEM_TYPE
    files: List[FileEntry] = field(default_factory=list)


@dataclass
class Section:
    number: int
    label: str
    path: ArchivalPath
    component: Optional[Component] = None
    items: List[Item] = field(default_factory=list)


class StructureBuilder:
    """Accumulates sections in discovery order."""

    def __init__(
        self,
        output_id: str,
        output_root: Path,
        display_format: Optional[str] = None,
        image_item_label: str = DEFAULT_IMAGE_ITEM_LABEL,
    ):
        self.output_id = output_id
        self.output_root = Path(output_root)
        self.display_format = display_format
        self.image_item_label = image_item_label
        self.sections: List[Section] = []

    def relative_target(self, target: str) -> str:
        try:
            return Path(target).relative_to(self.output_root).as_posix()
        except ValueError:
            return Path(target).as_posix()

    def add_section(self, component: Optional[Component], path: ArchivalPath, jobs: Sequence[Job]) -> Section:
        number = len(self.sections) + 1
        label = (component.title if component else None) or str(path)
        section = Section(number=number, label=label, path=path, component=component)

        by_key: Dict[str, Item] = {}
        for job in jobs:
            item = by_key.get(job.item)
            if item is None:
                order = len(section.items) + 1
                item = Item(order=order, key=job.item, label=self._item_label(component, order))
                by_key[job.item] = item
                section.items.append(item)
            relative = self.relative_target(job.target)
            item.files.append(FileEntry(file_id(job.use, relative), job.use, job.mime_type, relative))

        for item in section.items:
            item.type = self._item_type(item)

        self.sections.append(section)
        logger.debug("Section %d (%s): %d item(s)", number, path, len(section.items))
        return section

    def _item_label(self, component: Optional[Component], order: int) -> str:
        if component is not None:
            if component.title:
                return component.title
            if component.date:
                return component.date
        return str(order)

    def _item_type(self, item: Item) -> str:
        mime_types = [entry.mime_type for entry in item.files]
        if any(mime.startswith("audio/") for mime in mime_types):
            return "audio"
        if any(mime.startswith("video/") for mime in mime_types):
            return "video"
        if self.display_format and any(mime.startswith("image/") for mime in mime_types):
            return self.image_item_label
        return DEFAULT_ITEM_TYPE

    def reference_for(self, section: Section) -> str:
        return f"{self.output_id}_{section.number}_1"

    @property
    def entries(self) -> List[StructuralEntry]:
        return [
            StructuralEntry(
                section=section.number,
                order=item.order,
                file_id=entry.file_id,
                use=entry.use,
                mime_type=entry.mime_type,
                relative_target=entry.relative_target,
            )
            for section in self.sections
            for item in section.items
            for entry in item.files
        ]
