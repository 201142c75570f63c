"""Session lifecycle, local cache and state synchronisation."""

from .cache import CachedCollection, CacheSource, LocalCache
from .session import Session, SessionState, SessionStore
from .state import AppState
from .synchronizer import FanOutReport, StateSynchronizer

__all__ = [
    "AppState",
    "CacheSource",
    "CachedCollection",
    "FanOutReport",
    "LocalCache",
    "Session",
    "SessionState",
    "SessionStore",
    "StateSynchronizer",
]
