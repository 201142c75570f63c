"""Job applications of the signed-in user."""
from __future__ import annotations

from typing import Any

from clients.base import DomainClient
from jobsync.errors import ConflictError, DuplicateApplicationError
from jobsync.log import get_logger
from jobsync.schemas import ApplicationRecord, CreateApplicationRequest, UpdateApplicationRequest

log = get_logger(__name__)


class ApplicationsClient(DomainClient):
    async def list_applications(self) -> list[ApplicationRecord]:
        return await self._call(list[ApplicationRecord], "/applications", requires_auth=True)

    async def apply(
        self,
        job_id: str,
        cover_letter: str | None = None,
        resume_url: str | None = None,
    ) -> ApplicationRecord:
        """Create an application; a conflict means the user already applied."""

        request = CreateApplicationRequest(job_id=job_id, cover_letter=cover_letter, resume_url=resume_url)
        try:
            return await self._call(ApplicationRecord, "/applications", "POST", request.to_wire(), requires_auth=True)
        except ConflictError as exc:
            log.info("Duplicate application for job %s: %s", job_id, exc.message)
            raise DuplicateApplicationError(job_id, exc.message, exc.payload) from exc

    async def get_application(self, application_id: str) -> ApplicationRecord:
        return await self._call(ApplicationRecord, f"/applications/{application_id}", requires_auth=True)

    async def update_application(self, application_id: str, update: UpdateApplicationRequest) -> ApplicationRecord:
        return await self._call(
            ApplicationRecord, f"/applications/{application_id}", "PUT", update.to_wire(), requires_auth=True
        )

    async def withdraw(self, application_id: str) -> dict[str, Any] | None:
        return await self._call(dict[str, Any] | None, f"/applications/{application_id}", "DELETE", requires_auth=True)

    async def list_for_job(self, job_id: str) -> list[ApplicationRecord]:
        return await self._call(list[ApplicationRecord], f"/applications/job/{job_id}", requires_auth=True)

    async def has_applied(self, job_id: str) -> bool:
        applications = await self.list_applications()
        return any(application.job_id == job_id for application in applications)
