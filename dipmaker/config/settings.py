"""Packaging defaults and per-run options.

The fixed lists below are defaults only. Components take them as arguments, so a
caller can narrow the allow-list or rename queue stages without touching
module state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from dipmaker.config import env

DEFAULT_ALLOWED_MIME_TYPES: Tuple[str, ...] = (
    "image/tiff",
    "application/pdf",
    "application/xml",
    "text/plain",
    "audio/mpeg",
    "audio/ogg",
    "video/mp4",
)

# Lifecycle order matters: only tmp -> new is performed by the producer.
DEFAULT_QUEUE_STAGES: Tuple[str, ...] = ("tmp", "new", "working", "success", "failure")

SUPPORTED_OBJECT_TYPES: Tuple[str, ...] = ("ead", "monograph")

DEFAULT_IMAGE_ITEM_LABEL = "photograph"


@dataclass(frozen=True)
class PackageOptions:
    """Options normally supplied by the command line."""

    ocr_required: bool = False
    pdf_master: bool = False
    display_format: Optional[str] = None
    object_type: str = "ead"
    subdirectory: Optional[str] = None
    allowed_mime_types: Tuple[str, ...] = DEFAULT_ALLOWED_MIME_TYPES
    queue_stages: Tuple[str, ...] = DEFAULT_QUEUE_STAGES
    supported_object_types: Tuple[str, ...] = SUPPORTED_OBJECT_TYPES
    image_item_label: str = DEFAULT_IMAGE_ITEM_LABEL

    @classmethod
    def from_env(cls, **overrides) -> "PackageOptions":
        values = {
            "ocr_required": env.OCR_REQUIRED,
            "pdf_master": env.PDF_MASTER,
            "display_format": env.DISPLAY_FORMAT,
            "object_type": env.OBJECT_TYPE,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
