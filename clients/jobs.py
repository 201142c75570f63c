"""Anonymous job catalogue."""
from __future__ import annotations

from clients.base import DomainClient
from jobsync.schemas import Job


class JobsClient(DomainClient):
    async def list_jobs(self) -> list[Job]:
        return await self._call(list[Job], "/jobs")

    async def get_job(self, job_id: str) -> Job:
        return await self._call(Job, f"/jobs/{job_id}")
