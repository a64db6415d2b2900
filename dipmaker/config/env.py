"""Bootstrap configuration read from environment variables.

These values are read once at import time. Per-run packaging options live in
`dipmaker.config.settings.PackageOptions`.
"""

import os
from pathlib import Path


def string_to_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "yes", "1", "y", "on")


DEBUG = string_to_bool(os.getenv("DEBUG", "false"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
ENABLE_LOGGING = string_to_bool(os.getenv("ENABLE_LOGGING", "false"))
LOG_DIR = Path(os.getenv("LOG_DIR", "/var/log/dipmaker"))

# Defaults for the per-run flags when the caller does not set them.
OCR_REQUIRED = string_to_bool(os.getenv("DIPMAKER_OCR_REQUIRED", "false"))
PDF_MASTER = string_to_bool(os.getenv("DIPMAKER_PDF_MASTER", "false"))
DISPLAY_FORMAT = os.getenv("DIPMAKER_DISPLAY_FORMAT", "").strip() or None
OBJECT_TYPE = os.getenv("DIPMAKER_OBJECT_TYPE", "ead").strip().lower()
