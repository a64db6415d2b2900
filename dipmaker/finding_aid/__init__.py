"""Finding-aid access and container path resolution."""

from .containers import (
    CURRENT,
    LEGACY,
    ContainerGraph,
    ContainerRenderer,
    CurrentRenderer,
    LegacyRenderer,
    build_sections,
    normalize,
    render_container,
    resolve_component,
    resolve_section_paths,
)
from .ead import FindingAid
from .index import ContainerPathIndex, PathCollision

__all__ = [
    "CURRENT",
    "LEGACY",
    "ContainerGraph",
    "ContainerPathIndex",
    "ContainerRenderer",
    "CurrentRenderer",
    "FindingAid",
    "LegacyRenderer",
    "PathCollision",
    "build_sections",
    "normalize",
    "render_container",
    "resolve_component",
    "resolve_section_paths",
]
