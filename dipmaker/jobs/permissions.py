"""Ownership diagnostics logged when a queue write is refused.

Only called from failure paths. Collecting context must never mask the
original error, so every check here is best-effort.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

from dipmaker.core.logger import setup_logger

logger = setup_logger(__name__)


def _owner_name(uid: int) -> str:
    try:
        import pwd

        return pwd.getpwuid(uid).pw_name
    except (ImportError, KeyError):
        return str(uid)


def _group_name(gid: int) -> str:
    try:
        import grp

        return grp.getgrgid(gid).gr_name
    except (ImportError, KeyError):
        return str(gid)


def log_permission_context(label: str, paths: Iterable[Path], error: Optional[BaseException] = None) -> None:
    """Log the effective user and the mode/owner of each path at debug level."""

    if hasattr(os, "geteuid"):
        euid, egid = os.geteuid(), os.getegid()
        logger.debug(
            "Permission context (%s): euid=%s(%d) egid=%s(%d) error=%s",
            label,
            _owner_name(euid),
            euid,
            _group_name(egid),
            egid,
            error,
        )

    for candidate in paths:
        try:
            st = candidate.stat()
        except OSError as stat_error:
            logger.debug("Path permissions (%s): stat failed for %s: %s", label, candidate, stat_error)
            continue
        logger.debug(
            "Path permissions (%s): path=%s mode=%s owner=%s group=%s dir=%s",
            label,
            candidate,
            oct(st.st_mode & 0o777),
            _owner_name(st.st_uid),
            _group_name(st.st_gid),
            candidate.is_dir(),
        )
