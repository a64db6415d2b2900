"""Crash-safe filesystem queue for derivative jobs."""

from .fs import atomic_publish, exclusive_write, replace_write
from .writer import QUEUE_SUBDIR, JobQueue, queue_root, serialize_job

__all__ = [
    "JobQueue",
    "QUEUE_SUBDIR",
    "atomic_publish",
    "exclusive_write",
    "queue_root",
    "replace_write",
    "serialize_job",
]
