"""Mapping between legacy (label-only) and current (typed) container paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from dipmaker.core.models import ArchivalPath


@dataclass(frozen=True)
class PathCollision:
    """A legacy path and the current paths it cannot be told apart from."""

    kind: str  # "1:N" or "N:1"
    legacy: Tuple[ArchivalPath, ...]
    current: Tuple[ArchivalPath, ...]


@dataclass
class ContainerPathIndex:
    """Current and legacy paths seen during a run, per component and per scheme."""

    current: List[List[ArchivalPath]] = field(default_factory=list)
    legacy: List[List[ArchivalPath]] = field(default_factory=list)
    candidates: Dict[ArchivalPath, List[ArchivalPath]] = field(default_factory=dict)
    _seen: Set[Tuple[ArchivalPath, ArchivalPath]] = field(default_factory=set, repr=False)

    def add(self, current_paths: List[ArchivalPath], legacy_paths: List[ArchivalPath]) -> None:
        """Record one component's paths; both lists hold one entry per section, in order."""
        if len(current_paths) != len(legacy_paths):
            raise ValueError(
                f"Expected one legacy path per section, got {len(legacy_paths)} for {len(current_paths)}"
            )
        self.current.append(list(current_paths))
        self.legacy.append(list(legacy_paths))
        for path, legacy_path in zip(current_paths, legacy_paths):
            candidates = self.candidates.setdefault(legacy_path, [])
            if (legacy_path, path) in self._seen:
                continue
            self._seen.add((legacy_path, path))
            candidates.append(path)

    def legacy_for(self, path: ArchivalPath) -> List[ArchivalPath]:
        return [legacy_path for legacy_path, paths in self.candidates.items() if path in paths]

    def legacy_source_for(self, path: ArchivalPath) -> Optional[ArchivalPath]:
        """Legacy path to read from when it maps 1:1 onto `path`, else None."""
        legacy_paths = self.legacy_for(path)
        if len(legacy_paths) != 1:
            return None
        legacy_path = legacy_paths[0]
        if self.candidates[legacy_path] != [path]:
            return None
        return legacy_path

    def collisions(self) -> List[PathCollision]:
        found: List[PathCollision] = []
        for legacy_path, paths in self.candidates.items():
            if len(paths) > 1:
                found.append(PathCollision("1:N", (legacy_path,), tuple(paths)))

        reverse: Dict[ArchivalPath, List[ArchivalPath]] = {}
        for legacy_path, paths in self.candidates.items():
            for path in paths:
                reverse.setdefault(path, []).append(legacy_path)
        for path, legacy_paths in reverse.items():
            if len(legacy_paths) > 1:
                found.append(PathCollision("N:1", tuple(legacy_paths), (path,)))
        return found
