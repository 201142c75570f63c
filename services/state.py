"""Application state and the single reducer every change goes through."""
from __future__ import annotations

from dataclasses import dataclass, field, replace

from jobsync.errors import AuthErrorKind
from jobsync.schemas import Application, Job, Notification
from jobsync.store import StorageKeys
from services.cache import CacheSource, CachedCollection
from services.session import Session


@dataclass(frozen=True)
class AppState:
    session: Session = field(default_factory=Session)
    is_loading: bool = True
    theme: str = "light"
    onboarding_complete: bool = False
    jobs: CachedCollection[Job] = field(default_factory=CachedCollection)
    applications: CachedCollection[Application] = field(default_factory=CachedCollection)
    notifications: CachedCollection[Notification] = field(default_factory=CachedCollection)
    saved_job_ids: CachedCollection[str] = field(default_factory=CachedCollection)
    applied_job_ids: CachedCollection[str] = field(default_factory=CachedCollection)
    auth_error: AuthErrorKind | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def unread_count(self) -> int:
        return sum(1 for notification in self.notifications.items if not notification.is_read)

    def collection(self, key: str) -> CachedCollection:
        return getattr(self, COLLECTION_FIELDS[key])


COLLECTION_FIELDS = {
    StorageKeys.JOBS: "jobs",
    StorageKeys.APPLICATIONS: "applications",
    StorageKeys.NOTIFICATIONS: "notifications",
    StorageKeys.SAVED_JOBS: "saved_job_ids",
    StorageKeys.APPLIED_JOBS: "applied_job_ids",
}


# -- actions ----------------------------------------------------------------


@dataclass(frozen=True)
class FlagsLoaded:
    onboarding_complete: bool
    theme: str


@dataclass(frozen=True)
class SetLoading:
    is_loading: bool


@dataclass(frozen=True)
class SetTheme:
    theme: str


@dataclass(frozen=True)
class SetOnboardingComplete:
    complete: bool


@dataclass(frozen=True)
class SetSession:
    session: Session
    auth_error: AuthErrorKind | None = None


@dataclass(frozen=True)
class PublishCollection:
    """Replace a whole collection with a persisted or network snapshot."""

    key: str
    collection: CachedCollection


@dataclass(frozen=True)
class AddApplication:
    application: Application


@dataclass(frozen=True)
class RemoveApplication:
    application_id: str


@dataclass(frozen=True)
class SaveJob:
    job_id: str


@dataclass(frozen=True)
class UnsaveJob:
    job_id: str


@dataclass(frozen=True)
class MarkNotificationRead:
    notification_id: str


@dataclass(frozen=True)
class ClearUserData:
    """Empty every identity-scoped collection (logout or invalid session)."""


def _with_member(collection: CachedCollection[str], value: str) -> CachedCollection[str]:
    if value in collection.items:
        return collection
    return collection.replace_items((*collection.items, value))


def _without_member(collection: CachedCollection[str], value: str) -> CachedCollection[str]:
    return collection.replace_items(tuple(item for item in collection.items if item != value))


def reduce(state: AppState, action: object) -> AppState:
    """Return the state after ``action``; never awaits, so commits are atomic."""

    if isinstance(action, FlagsLoaded):
        return replace(state, onboarding_complete=action.onboarding_complete, theme=action.theme)
    if isinstance(action, SetLoading):
        return replace(state, is_loading=action.is_loading)
    if isinstance(action, SetTheme):
        return replace(state, theme=action.theme)
    if isinstance(action, SetOnboardingComplete):
        return replace(state, onboarding_complete=action.complete)
    if isinstance(action, SetSession):
        return replace(state, session=action.session, auth_error=action.auth_error)

    if isinstance(action, PublishCollection):
        name = COLLECTION_FIELDS[action.key]
        current: CachedCollection = getattr(state, name)
        if action.collection.source is CacheSource.PERSISTED and current.source is CacheSource.NETWORK:
            # A network snapshot already landed; the stale one must not replace it.
            return state
        return replace(state, **{name: action.collection})

    if isinstance(action, AddApplication):
        application = action.application
        applications = tuple(item for item in state.applications.items if item.id != application.id)
        return replace(
            state,
            applications=state.applications.replace_items((*applications, application)),
            applied_job_ids=_with_member(state.applied_job_ids, application.job_id),
        )
    if isinstance(action, RemoveApplication):
        removed = [item for item in state.applications.items if item.id == action.application_id]
        applied = state.applied_job_ids
        for application in removed:
            applied = _without_member(applied, application.job_id)
        return replace(
            state,
            applications=state.applications.replace_items(
                tuple(item for item in state.applications.items if item.id != action.application_id)
            ),
            applied_job_ids=applied,
        )

    if isinstance(action, SaveJob):
        return replace(state, saved_job_ids=_with_member(state.saved_job_ids, action.job_id))
    if isinstance(action, UnsaveJob):
        return replace(state, saved_job_ids=_without_member(state.saved_job_ids, action.job_id))

    if isinstance(action, MarkNotificationRead):
        notifications = tuple(
            item.model_copy(update={"is_read": True}) if item.id == action.notification_id else item
            for item in state.notifications.items
        )
        return replace(state, notifications=state.notifications.replace_items(notifications))

    if isinstance(action, ClearUserData):
        empty = CachedCollection.from_network([])
        return replace(
            state,
            applications=empty,
            notifications=empty,
            saved_job_ids=empty,
            applied_job_ids=empty,
        )

    raise TypeError(f"Unknown action: {type(action).__name__}")
