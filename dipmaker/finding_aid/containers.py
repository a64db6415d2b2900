"""Container rendering and path resolution.

A component's containers are either a flat sibling list (box, folder, ...) or a
forest described by `parent` references. Both shapes are reduced to ordered
sections, and each section is rendered to one path by a renderer strategy.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from dipmaker.core.logger import setup_logger
from dipmaker.core.models import ArchivalPath, Component, Container

logger = setup_logger(__name__)

DEFAULT_CONTAINER_TYPE = "container"
CUSTOM_CONTAINER_TYPE = "othertype"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize(value: Optional[str]) -> str:
    """Lowercase, trim and collapse each non-alphanumeric run to one underscore."""
    if not value:
        return ""
    return _NON_ALNUM.sub("_", value.strip().lower())


def container_type_name(container: Container) -> str:
    raw_type = normalize(container.container_type)
    if not raw_type:
        return DEFAULT_CONTAINER_TYPE
    if raw_type == CUSTOM_CONTAINER_TYPE:
        return normalize(container.type_label) or DEFAULT_CONTAINER_TYPE
    return raw_type


def render_container(container: Container) -> str:
    """Render one container as `Type_label`, e.g. `Box_1`."""
    return f"{container_type_name(container).capitalize()}_{normalize(container.label)}"


class ContainerRenderer(Protocol):
    """Strategy turning one section's containers into path tokens."""

    name: str

    def render_section(self, base: str, containers: Sequence[Container]) -> Tuple[str, ...]:
        ...


class CurrentRenderer:
    """Typed tokens: `Box_1/Folder_2`."""

    name = "current"

    def render_section(self, base: str, containers: Sequence[Container]) -> Tuple[str, ...]:
        return tuple(render_container(container) for container in containers)


class LegacyRenderer:
    """Label-only tokens, each extending the previous one: `base_1/base_1_2`."""

    name = "legacy"

    def render_section(self, base: str, containers: Sequence[Container]) -> Tuple[str, ...]:
        tokens = []
        prefix = base
        for container in containers:
            prefix = f"{prefix}_{normalize(container.label)}"
            tokens.append(prefix)
        return tuple(tokens)


CURRENT = CurrentRenderer()
LEGACY = LegacyRenderer()


def is_simple(containers: Sequence[Container]) -> bool:
    """True when no container declares a parent."""
    return not any(container.parent for container in containers)


class ContainerGraph:
    """Parent-linked containers of one component, indexed once by id."""

    def __init__(self, containers: Sequence[Container]):
        self._containers: Tuple[Container, ...] = tuple(containers)
        self._by_id: Dict[str, int] = {}
        for position, container in enumerate(self._containers):
            if container.id and container.id not in self._by_id:
                self._by_id[container.id] = position
        self._roots: Tuple[int, ...] = tuple(self._find_root(i) for i in range(len(self._containers)))

    def _find_root(self, position: int) -> int:
        seen = {position}
        current = position
        while True:
            parent_id = self._containers[current].parent
            if not parent_id:
                return current
            parent = self._by_id.get(parent_id)
            if parent is None:
                logger.debug("Container %r references unknown parent %r; starting a new section",
                             self._containers[current].id, parent_id)
                return current
            if parent in seen:
                logger.debug("Container %r is part of a parent cycle; starting a new section",
                             self._containers[position].id)
                return position
            seen.add(parent)
            current = parent

    def sections(self) -> List[List[Container]]:
        """One list per root, in root document order.

        Each list starts with its root; the other members follow in document order.
        """
        grouped: Dict[int, List[Container]] = {}
        for root in sorted(set(self._roots)):
            grouped[root] = [self._containers[root]]
        for position, root in enumerate(self._roots):
            if position != root:
                grouped[root].append(self._containers[position])
        return list(grouped.values())


def build_sections(containers: Sequence[Container]) -> List[List[Container]]:
    if not containers:
        return []
    if is_simple(containers):
        return [list(containers)]
    return ContainerGraph(containers).sections()


def resolve_component(
    component: Component,
    base: str,
    renderer: ContainerRenderer = CURRENT,
) -> List[ArchivalPath]:
    """Return the distinct archival paths a component contributes, in section order."""
    paths: List[ArchivalPath] = []
    for section in build_sections(component.containers):
        path = ArchivalPath(base=base, tokens=renderer.render_section(base, section))
        if path not in paths:
            paths.append(path)
    return paths


def resolve_section_paths(
    component: Component,
    base: str,
    current: ContainerRenderer = CURRENT,
    legacy: ContainerRenderer = LEGACY,
) -> List[Tuple[ArchivalPath, ArchivalPath]]:
    """Pair each section's current path with its legacy path, in section order."""
    pairs: List[Tuple[ArchivalPath, ArchivalPath]] = []
    for section in build_sections(component.containers):
        pair = (
            ArchivalPath(base=base, tokens=current.render_section(base, section)),
            ArchivalPath(base=base, tokens=legacy.render_section(base, section)),
        )
        if pair not in pairs:
            pairs.append(pair)
    return pairs
