"""Atomic filesystem operations for the job queue and metadata output.

Readers of the queue poll the `new` stage, so nothing may appear there until it
is complete. Files are written in full somewhere else first and then renamed
into place, which is atomic within one filesystem.
"""

import errno
import os
from pathlib import Path

from dipmaker.core.logger import setup_logger

from .permissions import log_permission_context

logger = setup_logger(__name__)


def _is_permission_error(e: Exception) -> bool:
    """Check if exception is a permission error (including NFS/SMB issues)."""
    return isinstance(e, PermissionError) or (isinstance(e, OSError) and e.errno == errno.EPERM)


def exclusive_write(dest_path: Path, data: bytes) -> Path:
    """Write data to a file that must not exist yet.

    The file is flushed to disk before returning. On any failure the partial
    file is removed and the error re-raised.

    Raises:
        FileExistsError: If dest_path already exists
    """
    # O_CREAT | O_EXCL fails atomically if file exists
    fd = os.open(str(dest_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    try:
        try:
            view = memoryview(data)
            while view:
                written = os.write(fd, view)
                view = view[written:]
            os.fsync(fd)
        finally:
            os.close(fd)
    except Exception as e:
        dest_path.unlink(missing_ok=True)
        if _is_permission_error(e):
            log_permission_context("exclusive_write", [dest_path, dest_path.parent], e)
        raise
    return dest_path


def atomic_publish(source_path: Path, dest_path: Path) -> Path:
    """Rename a fully written file into its final location.

    Uses os.rename(), which is atomic on the same filesystem. Existing
    destinations are never overwritten.

    Raises:
        FileExistsError: If dest_path already exists
        OSError: If source and destination are on different filesystems
    """
    # os.rename would silently overwrite on Unix
    if dest_path.exists():
        raise FileExistsError(errno.EEXIST, "Destination already exists", str(dest_path))

    try:
        os.rename(str(source_path), str(dest_path))
    except OSError as e:
        if e.errno == errno.EXDEV:
            logger.error(
                "Cannot publish %s: %s is on a different filesystem; "
                "queue stages must share one filesystem",
                source_path,
                dest_path.parent,
            )
        elif _is_permission_error(e):
            log_permission_context("atomic_publish", [source_path, dest_path.parent], e)
        raise
    return dest_path


def replace_write(dest_path: Path, data: bytes) -> Path:
    """Write data via a hidden temp file, then replace dest_path with it."""
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = dest_path.parent / f".{dest_path.name}.tmp"
    temp_path.unlink(missing_ok=True)
    try:
        exclusive_write(temp_path, data)
        temp_path.replace(dest_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
    return dest_path
