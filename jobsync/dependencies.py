"""Wiring helpers that assemble a ready-to-use synchronizer."""
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from clients import FallbackPolicy, build_clients
from jobsync.config import Settings, get_settings
from jobsync.database import build_engine, build_sessionmaker, init_models
from jobsync.log import configure_logging
from jobsync.store import KeyValueStore
from services import LocalCache, SessionStore, StateSynchronizer


def build_synchronizer(settings: Settings, store: KeyValueStore, http_client: httpx.AsyncClient) -> StateSynchronizer:
    """Compose clients, session store and cache around one token owner."""

    session_store: SessionStore | None = None

    def current_token() -> str | None:
        return session_store.token if session_store else None

    clients = build_clients(FallbackPolicy.from_settings(settings), http_client, current_token)
    session_store = SessionStore(clients.auth, store)
    return StateSynchronizer(settings, clients, session_store, LocalCache(store), store)


@asynccontextmanager
async def open_synchronizer(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[StateSynchronizer]:
    """Create the store and HTTP client, yield a synchronizer, then clean up."""

    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.data_directory / "logs")

    engine = build_engine(settings.database_url)
    await init_models(engine)
    store = KeyValueStore(build_sessionmaker(engine))
    try:
        async with httpx.AsyncClient(transport=transport) as http_client:
            yield build_synchronizer(settings, store, http_client)
    finally:
        await engine.dispose()
