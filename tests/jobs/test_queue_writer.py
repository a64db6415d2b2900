"""Tests for the stage-based job queue."""

import errno
import json
import os
from unittest.mock import patch

import pytest

from dipmaker.core.errors import DuplicateJobError, QueueWriteError
from dipmaker.core.models import Job
from dipmaker.jobs.writer import JobQueue, serialize_job


def _job(job_id="0a1b", **fields):
    values = dict(
        id=job_id,
        item="mss001_Box_1_0001",
        item_base="0001",
        command="scale;thumbnail",
        source="/aip/data/mss001/Box_1/0001.tif",
        target="/dip/data/mss001/Box_1/0001.thumbnail.jpg",
        mime_type="image/jpeg",
        use="thumbnail",
    )
    values.update(fields)
    return Job(**values)


class TestLayout:
    def test_for_output_creates_all_stages(self, tmp_path):
        queue = JobQueue.for_output(tmp_path)

        queue.ensure_layout()

        services = tmp_path / "jobs" / "services"
        assert sorted(p.name for p in services.iterdir()) == ["failure", "new", "success", "tmp", "working"]

    def test_custom_stage_names(self, tmp_path):
        queue = JobQueue(tmp_path, stages=("staging", "ready", "done"))

        assert queue.staging_dir == tmp_path / "staging"
        assert queue.ready_dir == tmp_path / "ready"

    @pytest.mark.parametrize("stages", [("tmp",), ("tmp", "tmp", "new")])
    def test_invalid_stages(self, tmp_path, stages):
        with pytest.raises(ValueError):
            JobQueue(tmp_path, stages=stages)


class TestEnqueue:
    """Jobs are written under tmp and renamed into new."""

    def test_job_visible_under_new_with_wire_form(self, tmp_path):
        queue = JobQueue.for_output(tmp_path)

        ready = queue.enqueue_all([_job()])[0]

        assert ready == tmp_path / "jobs" / "services" / "new" / "0a1b"
        assert json.loads(ready.read_text()) == {
            "id": "0a1b",
            "item": "mss001_Box_1_0001",
            "item_base": "0001",
            "command": "scale;thumbnail",
            "source": "/aip/data/mss001/Box_1/0001.tif",
            "target": "/dip/data/mss001/Box_1/0001.thumbnail.jpg",
            "mime_type": "image/jpeg",
            "use": "thumbnail",
        }
        assert list(queue.staging_dir.iterdir()) == []
        assert queue.pending() == ["0a1b"]

    def test_optional_fields_serialized_when_set(self):
        wire = json.loads(serialize_job(_job(page_count=3, ocr_required=True)))

        assert wire["page_count"] == 3
        assert wire["ocr_required"] is True

    def test_truncated_write_never_reaches_new(self, tmp_path):
        queue = JobQueue.for_output(tmp_path)
        queue.ensure_layout()
        real_write = os.write
        calls = []

        def truncated_write(fd, data):
            if calls:
                raise OSError(errno.EIO, "Input/output error")
            calls.append(fd)
            return real_write(fd, bytes(data[:5]))

        with patch("dipmaker.jobs.fs.os.write", side_effect=truncated_write):
            with pytest.raises(QueueWriteError):
                queue.enqueue(_job())

        assert list(queue.ready_dir.iterdir()) == []
        assert list(queue.staging_dir.iterdir()) == []

    def test_failed_rename_leaves_orphan_in_tmp(self, tmp_path):
        queue = JobQueue.for_output(tmp_path)
        queue.ensure_layout()

        with patch("dipmaker.jobs.fs.os.rename", side_effect=OSError(errno.EIO, "Input/output error")):
            with pytest.raises(QueueWriteError):
                queue.enqueue(_job())

        assert queue.pending() == []
        assert [p.name for p in queue.staging_dir.iterdir()] == ["0a1b"]

    def test_duplicate_id_in_run(self, tmp_path):
        queue = JobQueue.for_output(tmp_path)
        queue.enqueue_all([_job()])

        with pytest.raises(DuplicateJobError):
            queue.enqueue(_job())

    def test_duplicate_id_already_waiting(self, tmp_path):
        JobQueue.for_output(tmp_path).enqueue_all([_job()])

        with pytest.raises(DuplicateJobError):
            JobQueue.for_output(tmp_path).enqueue_all([_job()])

    def test_worker_stages_untouched(self, tmp_path):
        queue = JobQueue.for_output(tmp_path)
        queue.enqueue_all([_job("a"), _job("b")])

        for stage in ("working", "success", "failure"):
            assert list(queue.stage_dir(stage).iterdir()) == []
        assert queue.pending() == ["a", "b"]
