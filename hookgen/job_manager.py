"""In-memory job tracking for hook video renders."""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from uuid import uuid4

from hookgen.models import HookScript, JobStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Job:
    """
    One hook video render.

    ``script`` is the hook being rendered. It is None until the job either
    receives a caller-supplied script or generates one. ``stage`` names the
    pipeline step currently running.
    """

    def __init__(self, job_id: str, script: Optional[HookScript] = None):
        self.job_id = job_id
        self.script = script
        self.stage: Optional[str] = None
        self.status = JobStatus.QUEUED
        self.progress = 0
        self.video_path: Optional[str] = None
        self.error: Optional[str] = None
        self.created_at = _now()
        self.updated_at = _now()

    @property
    def hook(self) -> Optional[str]:
        return self.script.hook if self.script else None

    @property
    def overlay(self) -> Optional[str]:
        return self.script.overlay if self.script else None

    def _touch(self):
        self.updated_at = _now()

    def set_script(self, script: HookScript):
        self.script = script
        self._touch()

    def advance(self, progress: int, stage: Optional[str] = None, status: Optional[JobStatus] = None):
        """Move to ``progress`` percent, optionally entering a new stage or status."""
        self.progress = min(100, max(0, progress))
        if stage:
            self.stage = stage
        if status:
            self.status = status
        self._touch()

    def mark_complete(self, video_path: str):
        self.status = JobStatus.COMPLETE
        self.stage = None
        self.progress = 100
        self.video_path = video_path
        self._touch()

    def mark_error(self, error: str):
        """Fail the job; progress and stage stay where the failure happened."""
        self.status = JobStatus.ERROR
        self.error = error
        self._touch()


class JobManager:
    """Render jobs keyed by ID, guarded by one asyncio lock."""

    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = asyncio.Lock()

    async def create_job(self, script: Optional[HookScript] = None) -> str:
        job_id = str(uuid4())
        async with self._lock:
            self._jobs[job_id] = Job(job_id, script)
        return job_id

    async def get_job(self, job_id: str) -> Optional[Job]:
        async with self._lock:
            return self._jobs.get(job_id)

    async def _apply(self, job_id: str, action: str, *args):
        # Updates for jobs already swept by cleanup_old_jobs are dropped
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is not None:
                getattr(job, action)(*args)

    async def set_job_script(self, job_id: str, script: HookScript):
        await self._apply(job_id, "set_script", script)

    async def advance_job(
        self,
        job_id: str,
        progress: int,
        stage: Optional[str] = None,
        status: Optional[JobStatus] = None,
    ):
        await self._apply(job_id, "advance", progress, stage, status)

    async def mark_job_complete(self, job_id: str, video_path: str):
        await self._apply(job_id, "mark_complete", video_path)

    async def mark_job_error(self, job_id: str, error: str):
        await self._apply(job_id, "mark_error", error)

    async def cleanup_old_jobs(self, max_age_hours: int = 24) -> int:
        """Drop jobs untouched for ``max_age_hours``; returns how many went."""
        cutoff = _now() - timedelta(hours=max_age_hours)
        async with self._lock:
            stale = [job_id for job_id, job in self._jobs.items() if job.updated_at < cutoff]
            for job_id in stale:
                del self._jobs[job_id]
        return len(stale)


# Shared by the routes and the background render task
job_manager = JobManager()
