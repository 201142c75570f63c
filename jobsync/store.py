"""Persistent key-value store backed by the async database."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from jobsync.log import get_logger
from jobsync.models import KeyValueEntry

log = get_logger(__name__)


class StorageKeys:
    AUTH_TOKEN = "authToken"
    IDENTITY = "user"
    THEME = "theme"
    ONBOARDING_COMPLETE = "onboardingComplete"
    JOBS = "jobs"
    APPLICATIONS = "applications"
    NOTIFICATIONS = "notifications"
    SAVED_JOBS = "savedJobs"
    APPLIED_JOBS = "appliedJobs"
    PENDING_APPLICATION = "pendingJobApplication"

    # Cleared on logout; jobs, theme and onboarding survive.
    USER_SCOPED = (APPLICATIONS, NOTIFICATIONS, SAVED_JOBS, APPLIED_JOBS)


class KeyValueStore:
    """String values by key that survive process restarts."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self.session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self.session_factory() as session:
            result = await session.execute(select(KeyValueEntry.value).where(KeyValueEntry.key == key))
            return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        async with self.session_factory() as session:
            await session.merge(KeyValueEntry(key=key, value=value))
            await session.commit()
        log.debug("Stored %s (%d chars)", key, len(value))

    async def remove(self, key: str) -> None:
        await self.remove_many([key])

    async def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        async with self.session_factory() as session:
            await session.execute(delete(KeyValueEntry).where(KeyValueEntry.key.in_(keys)))
            await session.commit()
        log.debug("Removed %s", ", ".join(keys))
