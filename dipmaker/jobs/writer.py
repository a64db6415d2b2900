"""Stage-based filesystem queue for derivative jobs.

Layout: `<output>/jobs/services/<stage>/<job-id>`. The producer writes each
descriptor under the first stage (`tmp`) and renames it into the second
(`new`). Every later stage belongs to the external workers and is only created
here, never read or written.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Sequence

from dipmaker.config.settings import DEFAULT_QUEUE_STAGES
from dipmaker.core.errors import DuplicateJobError, QueueWriteError
from dipmaker.core.logger import setup_logger
from dipmaker.core.models import Job

from .fs import atomic_publish, exclusive_write

logger = setup_logger(__name__)

QUEUE_SUBDIR = Path("jobs") / "services"


def serialize_job(job: Job) -> bytes:
    return json.dumps(job.to_wire(), indent=2, sort_keys=True).encode("utf-8")


def queue_root(output_dir: Path) -> Path:
    return Path(output_dir) / QUEUE_SUBDIR


class JobQueue:
    """Producer side of the job queue rooted at `root`."""

    def __init__(self, root: Path, stages: Sequence[str] = DEFAULT_QUEUE_STAGES):
        if len(stages) < 2:
            raise ValueError("A job queue needs at least a staging and a ready stage")
        if len(set(stages)) != len(stages):
            raise ValueError(f"Queue stage names must be unique: {list(stages)}")
        self.root = Path(root)
        self.stages = tuple(stages)
        self._enqueued: set = set()

    @classmethod
    def for_output(cls, output_dir: Path, stages: Sequence[str] = DEFAULT_QUEUE_STAGES) -> "JobQueue":
        return cls(queue_root(output_dir), stages)

    @property
    def staging_dir(self) -> Path:
        return self.root / self.stages[0]

    @property
    def ready_dir(self) -> Path:
        return self.root / self.stages[1]

    def stage_dir(self, stage: str) -> Path:
        if stage not in self.stages:
            raise ValueError(f"Unknown queue stage: {stage}")
        return self.root / stage

    def ensure_layout(self) -> None:
        for stage in self.stages:
            (self.root / stage).mkdir(parents=True, exist_ok=True)

    def enqueue(self, job: Job) -> Path:
        """Hand one job to the workers; returns its path under the ready stage."""
        if job.id in self._enqueued:
            raise DuplicateJobError(f"Job {job.id} was already enqueued in this run")

        staged = self.staging_dir / job.id
        ready = self.ready_dir / job.id
        if ready.exists():
            raise DuplicateJobError(f"Job {job.id} is already waiting in {self.ready_dir}")

        try:
            exclusive_write(staged, serialize_job(job))
        except FileExistsError as e:
            raise DuplicateJobError(f"Job {job.id} is already being staged: {staged}") from e
        except OSError as e:
            raise QueueWriteError(f"Could not stage job {job.id}: {e}") from e

        try:
            atomic_publish(staged, ready)
        except OSError as e:
            # The staged copy stays behind as an orphan; re-running the package is the recovery.
            raise QueueWriteError(f"Could not publish job {job.id}: {e}") from e

        self._enqueued.add(job.id)
        logger.debug("Enqueued %s job %s for %s", job.command, job.id, job.item)
        return ready

    def enqueue_all(self, jobs: Iterable[Job]) -> List[Path]:
        self.ensure_layout()
        return [self.enqueue(job) for job in jobs]

    def pending(self) -> List[str]:
        """Job ids currently waiting in the ready stage."""
        if not self.ready_dir.exists():
            return []
        return sorted(entry.name for entry in self.ready_dir.iterdir() if entry.is_file())
