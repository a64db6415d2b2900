"""Fixed job templates for each supported source kind.

Templates are listed in emission order: thumbnails, then the reference image,
then the master or print image, then OCR outputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .mime import SourceKind


class Guard(Enum):
    NONE = "none"
    # Skipped when a PDF already sits next to the source.
    NO_SIBLING_PDF = "no_sibling_pdf"
    # Skipped when a sibling already has this template's output MIME type.
    NO_SIBLING_OUTPUT = "no_sibling_output"


@dataclass(frozen=True)
class JobTemplate:
    command: str
    mime_type: str
    use: str
    # Replaces the source extension; None keeps the source file name.
    suffix: Optional[str] = None
    guard: Guard = Guard.NONE
    requires_ocr: bool = False
    # Also skipped when a .txt with the item's base name already exists.
    skip_if_text_sibling: bool = False
    # Sets ocr_required on the job when OCR is requested.
    marks_ocr: bool = False


THUMBNAIL = JobTemplate("scale;thumbnail", "image/jpeg", "thumbnail", suffix=".thumbnail.jpg")
FRONT_THUMBNAIL = JobTemplate("scale;front", "image/jpeg", "front thumbnail", suffix=".front.jpg")
REFERENCE_IMAGE = JobTemplate("tiff2jpeg", "image/jpeg", "reference image", suffix=".jpg")
TIFF_PRINT_IMAGE = JobTemplate(
    "tiff2pdf", "application/pdf", "print image", suffix=".pdf", guard=Guard.NO_SIBLING_PDF, marks_ocr=True,
)
TIFF_OCR = JobTemplate(
    "tiff2txt",
    "text/plain",
    "ocr",
    suffix=".txt",
    guard=Guard.NO_SIBLING_PDF,
    requires_ocr=True,
    skip_if_text_sibling=True,
)

PDF_MASTER = JobTemplate("copy", "application/pdf", "master")
PDF_PRINT_IMAGE = JobTemplate("copy", "application/pdf", "print image")
PDF_COORDINATES = JobTemplate(
    "pdf2xml", "application/xml", "coordinates", suffix=".xml",
    guard=Guard.NO_SIBLING_OUTPUT, requires_ocr=True,
)
PDF_OCR = JobTemplate(
    "pdf2txt", "text/plain", "ocr", suffix=".txt",
    guard=Guard.NO_SIBLING_OUTPUT, requires_ocr=True,
)

TEMPLATES: Dict[SourceKind, Tuple[JobTemplate, ...]] = {
    SourceKind.TIFF: (THUMBNAIL, FRONT_THUMBNAIL, REFERENCE_IMAGE, TIFF_PRINT_IMAGE, TIFF_OCR),
    SourceKind.PDF: (PDF_PRINT_IMAGE, PDF_COORDINATES, PDF_OCR),
    SourceKind.XML: (JobTemplate("copy", "application/xml", "coordinates"),),
    SourceKind.TEXT: (JobTemplate("copy", "text/plain", "ocr"),),
    SourceKind.MP3: (JobTemplate("copy", "audio/mpeg", "reference audio"),),
    SourceKind.OGG: (JobTemplate("copy", "audio/ogg", "secondary reference audio"),),
    SourceKind.MP4: (JobTemplate("copy", "video/mp4", "reference video"),),
}


def templates_for(kind: SourceKind, pdf_master: bool = False) -> Tuple[JobTemplate, ...]:
    """Templates for a source kind; the PDF copy is tagged by the master flag."""
    templates = TEMPLATES[kind]
    if kind is SourceKind.PDF and pdf_master:
        return (PDF_MASTER,) + templates[1:]
    return templates
