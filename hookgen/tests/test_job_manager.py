"""Tests for in-memory render job tracking."""
from datetime import timedelta

import pytest

from hookgen.job_manager import Job, JobManager
from hookgen.models import HookScript, JobStatus

SCRIPT = HookScript(hook="If you're still making pins from scratch, stop.", overlay="Stop making pins")


class TestJob:

    def test_new_job_is_queued_without_script(self):
        job = Job("abc")
        assert job.status == JobStatus.QUEUED
        assert job.progress == 0
        assert job.stage is None
        assert (job.hook, job.overlay) == (None, None)

    def test_supplied_script_is_exposed(self):
        job = Job("abc", SCRIPT)
        assert job.hook == SCRIPT.hook
        assert job.overlay == "Stop making pins"

    def test_generated_script_is_recorded(self):
        job = Job("abc")
        before = job.updated_at
        job.set_script(SCRIPT)
        assert job.script is SCRIPT
        assert job.updated_at >= before

    @pytest.mark.parametrize("progress,expected", [(-5, 0), (42, 42), (150, 100)])
    def test_progress_is_clamped(self, progress, expected):
        job = Job("abc")
        job.advance(progress)
        assert job.progress == expected

    def test_stage_only_changes_when_given(self):
        job = Job("abc")
        job.advance(40, "frames", JobStatus.PROCESSING)
        job.advance(60)
        assert (job.stage, job.status, job.progress) == ("frames", JobStatus.PROCESSING, 60)

    def test_complete_clears_stage(self):
        job = Job("abc")
        job.advance(95, "encoding")
        job.mark_complete("/videos/abc.mp4")
        assert job.status == JobStatus.COMPLETE
        assert job.progress == 100
        assert job.stage is None
        assert job.video_path == "/videos/abc.mp4"

    def test_error_keeps_progress_and_stage(self):
        job = Job("abc")
        job.advance(40, "frames", JobStatus.PROCESSING)
        job.mark_error("ffmpeg failed")
        assert job.status == JobStatus.ERROR
        assert job.error == "ffmpeg failed"
        assert (job.progress, job.stage) == (40, "frames")


@pytest.mark.asyncio
async def test_manager_lifecycle():
    manager = JobManager()
    job_id = await manager.create_job()

    await manager.advance_job(job_id, 5, "script", JobStatus.PROCESSING)
    await manager.set_job_script(job_id, SCRIPT)
    await manager.advance_job(job_id, 30, "composition")
    job = await manager.get_job(job_id)
    assert (job.status, job.progress, job.stage) == (JobStatus.PROCESSING, 30, "composition")
    assert job.overlay == SCRIPT.overlay

    await manager.mark_job_complete(job_id, "/out.mp4")
    assert (await manager.get_job(job_id)).status == JobStatus.COMPLETE


@pytest.mark.asyncio
async def test_unknown_job_updates_are_ignored():
    manager = JobManager()
    await manager.advance_job("missing", 50)
    await manager.set_job_script("missing", SCRIPT)
    await manager.mark_job_error("missing", "boom")
    assert await manager.get_job("missing") is None


@pytest.mark.asyncio
async def test_cleanup_old_jobs():
    manager = JobManager()
    old_id = await manager.create_job()
    new_id = await manager.create_job(SCRIPT)
    old_job = await manager.get_job(old_id)
    old_job.updated_at -= timedelta(hours=25)

    removed = await manager.cleanup_old_jobs(max_age_hours=24)

    assert removed == 1
    assert await manager.get_job(old_id) is None
    assert await manager.get_job(new_id) is not None
