"""Supported source MIME types.

Every supported source type is one `SourceKind` member. Aliases reported by
different sniffers are folded onto the member's canonical type before
dispatch, so `audio/mp3` and `audio/mpeg` plan the same jobs.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

MIME_ALIASES: Dict[str, str] = {
    "image/tif": "image/tiff",
    "image/x-tiff": "image/tiff",
    "text/xml": "application/xml",
    "audio/mp3": "audio/mpeg",
    "audio/x-mp3": "audio/mpeg",
    "audio/mpeg3": "audio/mpeg",
    "application/ogg": "audio/ogg",
    "audio/x-ogg": "audio/ogg",
    "application/x-pdf": "application/pdf",
}


def normalize_mime(mime_type: Optional[str]) -> Optional[str]:
    if not mime_type:
        return None
    value = mime_type.split(";", 1)[0].strip().lower()
    return MIME_ALIASES.get(value, value)


class SourceKind(Enum):
    TIFF = "image/tiff"
    PDF = "application/pdf"
    XML = "application/xml"
    TEXT = "text/plain"
    MP3 = "audio/mpeg"
    OGG = "audio/ogg"
    MP4 = "video/mp4"

    @classmethod
    def of(cls, mime_type: Optional[str]) -> Optional["SourceKind"]:
        """Member for a MIME type, or None when the type is unsupported."""
        normalized = normalize_mime(mime_type)
        if normalized is None:
            return None
        try:
            return cls(normalized)
        except ValueError:
            return None
