"""Derivative job planning keyed by source MIME type."""

from .mime import MIME_ALIASES, SourceKind, normalize_mime
from .planner import DerivativePlanner, item_base, item_key, new_job_id
from .templates import TEMPLATES, Guard, JobTemplate, templates_for

__all__ = [
    "DerivativePlanner",
    "Guard",
    "JobTemplate",
    "MIME_ALIASES",
    "SourceKind",
    "TEMPLATES",
    "item_base",
    "item_key",
    "new_job_id",
    "normalize_mime",
    "templates_for",
]
