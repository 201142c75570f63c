"""Saved-job bookmarks; saving is idempotent through conflict handling."""
from __future__ import annotations

from enum import Enum
from typing import Any

from clients.base import DomainClient
from jobsync.errors import ConflictError
from jobsync.log import get_logger
from jobsync.schemas import SavedJobRecord

log = get_logger(__name__)


class SaveOutcome(str, Enum):
    SAVED = "saved"
    ALREADY_SAVED = "already_saved"


class SavedJobsClient(DomainClient):
    async def list_saved_jobs(self) -> list[SavedJobRecord]:
        return await self._call(list[SavedJobRecord], "/saved-jobs", requires_auth=True)

    async def saved_job_ids(self) -> list[str]:
        return [record.job_id for record in await self.list_saved_jobs()]

    async def save_job(self, job_id: str) -> SaveOutcome:
        try:
            await self._call(SavedJobRecord | dict[str, Any], "/saved-jobs", "POST", {"jobId": job_id}, requires_auth=True)
        except ConflictError as exc:
            log.info("Job %s already saved: %s", job_id, exc.message)
            return SaveOutcome.ALREADY_SAVED
        return SaveOutcome.SAVED

    async def unsave_job(self, job_id: str) -> dict[str, Any] | None:
        return await self._call(dict[str, Any] | None, f"/saved-jobs/{job_id}", "DELETE", requires_auth=True)
