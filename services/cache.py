"""Persisted snapshots of collections and lightweight flags."""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from jobsync.log import get_logger
from jobsync.schemas import Application, Job, Notification
from jobsync.store import KeyValueStore, StorageKeys

log = get_logger(__name__)

T = TypeVar("T")


class CacheSource(str, Enum):
    PERSISTED = "persisted"
    NETWORK = "network"


@dataclass(frozen=True)
class CachedCollection(Generic[T]):
    items: tuple[T, ...] = ()
    source: CacheSource = CacheSource.PERSISTED
    last_refreshed: datetime | None = None

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def from_network(cls, items: list[T]) -> CachedCollection[T]:
        return cls(tuple(items), CacheSource.NETWORK, datetime.now(timezone.utc))

    def replace_items(self, items: list[T] | tuple[T, ...]) -> CachedCollection[T]:
        """Same provenance, new contents (local mutation after a confirmed call)."""
        return CachedCollection(tuple(items), self.source, self.last_refreshed)


@dataclass
class _Snapshot:
    adapter: TypeAdapter
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class LocalCache:
    """Reads and writes collection snapshots and UI flags in the persistent store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._snapshots: dict[str, _Snapshot] = {
            StorageKeys.JOBS: _Snapshot(TypeAdapter(list[Job])),
            StorageKeys.APPLICATIONS: _Snapshot(TypeAdapter(list[Application])),
            StorageKeys.NOTIFICATIONS: _Snapshot(TypeAdapter(list[Notification])),
            StorageKeys.SAVED_JOBS: _Snapshot(TypeAdapter(list[str])),
            StorageKeys.APPLIED_JOBS: _Snapshot(TypeAdapter(list[str])),
        }

    async def load_flags(self) -> tuple[bool, str]:
        onboarding, theme = await asyncio.gather(
            self.store.get(StorageKeys.ONBOARDING_COMPLETE),
            self.store.get(StorageKeys.THEME),
        )
        return onboarding == "true", theme if theme in ("light", "dark") else "light"

    async def save_theme(self, theme: str) -> None:
        await self.store.set(StorageKeys.THEME, theme)

    async def save_onboarding_complete(self, complete: bool) -> None:
        await self.store.set(StorageKeys.ONBOARDING_COMPLETE, "true" if complete else "false")

    async def load(self, key: str) -> CachedCollection | None:
        """Last persisted snapshot for ``key``; unreadable snapshots count as missing."""

        raw = await self.store.get(key)
        if raw is None:
            return None
        snapshot = self._snapshots[key]
        try:
            document = json.loads(raw)
            items = snapshot.adapter.validate_python(document["items"])
            refreshed = document.get("lastRefreshed")
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            log.warning("Discarding unreadable %s snapshot: %s", key, exc)
            return None
        return CachedCollection(
            tuple(items),
            CacheSource.PERSISTED,
            datetime.fromisoformat(refreshed) if refreshed else None,
        )

    async def write(self, key: str, read_current: Any) -> None:
        """Persist the latest committed value of ``key``.

        ``read_current`` is called once the per-key lock is held, so the last
        writer always stores the newest in-memory state.
        """

        snapshot = self._snapshots[key]
        async with snapshot.lock:
            collection: CachedCollection = read_current()
            document = {
                "items": snapshot.adapter.dump_python(list(collection.items), mode="json", by_alias=True),
                "lastRefreshed": collection.last_refreshed.isoformat() if collection.last_refreshed else None,
            }
            await self.store.set(key, json.dumps(document))

    async def clear_user_scoped(self) -> None:
        await self.store.remove_many(StorageKeys.USER_SCOPED)
