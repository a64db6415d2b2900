"""File discovery: which files in a directory are eligible for packaging.

The pipeline only depends on the `FileDiscovery` protocol. The default
implementation guesses MIME types from file extensions; a content-sniffing
implementation can be passed in instead.
"""

from __future__ import annotations

import mimetypes
import os
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from dipmaker.config.settings import DEFAULT_ALLOWED_MIME_TYPES
from dipmaker.core.logger import setup_logger
from dipmaker.core.models import SourceFile
from dipmaker.derivatives.mime import normalize_mime

logger = setup_logger(__name__)

# Extensions whose platform mimetypes mapping varies between Python versions.
KNOWN_EXTENSIONS = {
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".pdf": "application/pdf",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".mp4": "video/mp4",
}


class FileDiscovery(Protocol):
    def list_files(self, directory: Path) -> List[SourceFile]:
        ...


def guess_mime_type(path: Path) -> Optional[str]:
    known = KNOWN_EXTENSIONS.get(path.suffix.lower())
    if known:
        return known
    guessed, _ = mimetypes.guess_type(path.name)
    return normalize_mime(guessed)


class MimetypesDiscovery:
    """Lists regular files directly inside a directory whose type is allowed."""

    def __init__(
        self,
        allowed_mime_types: Iterable[str] = DEFAULT_ALLOWED_MIME_TYPES,
        subdirectory: Optional[str] = None,
    ):
        self.allowed_mime_types = frozenset(normalize_mime(m) for m in allowed_mime_types)
        self.subdirectory = subdirectory

    def search_dir(self, directory: Path) -> Path:
        return Path(directory) / self.subdirectory if self.subdirectory else Path(directory)

    def list_files(self, directory: Path) -> List[SourceFile]:
        search_dir = self.search_dir(directory)
        if not search_dir.is_dir():
            return []

        try:
            entries = sorted(os.scandir(search_dir), key=lambda e: e.name)
        except PermissionError as exc:
            logger.warning(f"Permission denied scanning directory: {search_dir} ({exc})")
            return []

        found: List[SourceFile] = []
        for entry in entries:
            if entry.name.startswith(".") or not entry.is_file():
                continue
            path = Path(entry.path)
            mime_type = guess_mime_type(path)
            if mime_type not in self.allowed_mime_types:
                continue
            found.append(SourceFile(path=path, mime_type=mime_type))
        return found
