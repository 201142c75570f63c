"""Top-level orchestration of session, cache and the domain clients."""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from clients import ApiClients, SaveOutcome
from jobsync.config import ReadReceiptPolicy, Settings
from jobsync.errors import AuthenticationError, DuplicateApplicationError, JobSyncError
from jobsync.log import get_logger
from jobsync.schemas import (
    Application,
    Identity,
    Job,
    RegisterRequest,
    SearchParams,
    SearchResponse,
    UpdateProfileRequest,
    UserProfile,
)
from jobsync.store import KeyValueStore, StorageKeys
from services.cache import CachedCollection, LocalCache
from services.session import Session, SessionStore
from services.state import (
    AddApplication,
    AppState,
    ClearUserData,
    FlagsLoaded,
    MarkNotificationRead,
    PublishCollection,
    RemoveApplication,
    SaveJob,
    SetLoading,
    SetOnboardingComplete,
    SetSession,
    SetTheme,
    UnsaveJob,
    reduce,
)

log = get_logger(__name__)

T = TypeVar("T")
Listener = Callable[[AppState], None]


@dataclass
class FanOutReport:
    """Outcome of one settle-all fan-out; each collection succeeds or fails alone."""

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, BaseException] = field(default_factory=dict)
    discarded: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed and not self.discarded


class StateSynchronizer:
    """Owns the session and every cached collection; callers hold an instance.

    Every state change is a call to :func:`services.state.reduce` through
    ``_dispatch``. A collection is persisted only after its in-memory commit.
    """

    def __init__(
        self,
        settings: Settings,
        clients: ApiClients,
        session_store: SessionStore,
        cache: LocalCache,
        store: KeyValueStore,
    ) -> None:
        self.settings = settings
        self.clients = clients
        self.session_store = session_store
        self.cache = cache
        self.store = store
        self._state = AppState()
        self._listeners: list[Listener] = []
        self._inflight: dict[tuple[str, str], asyncio.Future] = {}

    # -- read / subscribe ---------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, action: object) -> None:
        self._state = reduce(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)

    async def _persist(self, *keys: str) -> None:
        for key in keys:
            await self.cache.write(key, lambda key=key: self._state.collection(key))

    def _sync_session(self) -> None:
        self._dispatch(SetSession(self.session_store.session, self.session_store.failure_kind))

    # -- boot and refresh ---------------------------------------------------

    async def boot(self) -> AppState:
        onboarding_complete, theme = await self.cache.load_flags()
        self._dispatch(FlagsLoaded(onboarding_complete, theme))
        self._dispatch(SetLoading(False))

        await asyncio.gather(
            self._publish_persisted(StorageKeys.JOBS),
            self.refresh_jobs(),
            self._restore_session(),
        )
        return self._state

    async def refresh(self) -> tuple[bool, FanOutReport]:
        jobs_ok, report = await asyncio.gather(self.refresh_jobs(), self.refresh_user_data())
        return jobs_ok, report

    async def refresh_jobs(self) -> bool:
        """Fetch the job catalogue; on failure the cached snapshot stays authoritative."""

        try:
            jobs = await self._guarded(self.clients.jobs.list_jobs())
        except JobSyncError as exc:
            log.warning("Job refresh failed, keeping %d cached jobs: %s", len(self._state.jobs), exc)
            return False
        self._dispatch(PublishCollection(StorageKeys.JOBS, CachedCollection.from_network(jobs)))
        await self._persist(StorageKeys.JOBS)
        log.info("Refreshed %d jobs", len(jobs))
        return True

    async def refresh_user_data(self) -> FanOutReport:
        """Fetch applications, notifications and saved jobs independently."""

        report = FanOutReport()
        if not self._state.is_authenticated:
            self._dispatch(ClearUserData())
            return report

        generation = self.session_store.generation
        await asyncio.gather(
            self._settle(StorageKeys.APPLICATIONS, self._fetch_applications, generation, report),
            self._settle(StorageKeys.NOTIFICATIONS, self._fetch_notifications, generation, report),
            self._settle(StorageKeys.SAVED_JOBS, self._fetch_saved_job_ids, generation, report),
        )
        if report.failed:
            log.warning("User data refresh incomplete: %s failed", ", ".join(sorted(report.failed)))
        return report

    async def _settle(
        self,
        name: str,
        fetch: Callable[[], Awaitable[dict[str, list[Any]]]],
        generation: int,
        report: FanOutReport,
    ) -> None:
        try:
            snapshots = await self._guarded(fetch())
        except JobSyncError as exc:
            report.failed[name] = exc
            log.warning("Refreshing %s failed, keeping previous snapshot: %s", name, exc)
            return

        if self._session_ended(generation, name):
            report.discarded.append(name)
            return

        for key, items in snapshots.items():
            self._dispatch(PublishCollection(key, CachedCollection.from_network(items)))
        report.succeeded.append(name)
        await self._persist(*snapshots)

    async def _fetch_applications(self) -> dict[str, list[Any]]:
        records = await self.clients.applications.list_applications()
        applications = [Application.from_record(record) for record in records]
        applied: list[str] = []
        for application in applications:
            if application.job_id not in applied:
                applied.append(application.job_id)
        return {StorageKeys.APPLICATIONS: applications, StorageKeys.APPLIED_JOBS: applied}

    async def _fetch_notifications(self) -> dict[str, list[Any]]:
        return {StorageKeys.NOTIFICATIONS: await self.clients.notifications.list_notifications()}

    async def _fetch_saved_job_ids(self) -> dict[str, list[Any]]:
        ids = await self.clients.saved_jobs.saved_job_ids()
        return {StorageKeys.SAVED_JOBS: list(dict.fromkeys(ids))}

    async def _publish_persisted(self, key: str, generation: int | None = None) -> None:
        snapshot = await self.cache.load(key)
        if snapshot is None:
            return
        if generation is not None and self.session_store.generation != generation:
            return
        self._dispatch(PublishCollection(key, snapshot))
        log.debug("Published %d persisted %s", len(snapshot), key)

    async def _restore_session(self) -> None:
        await self.session_store.restore()
        self._sync_session()

        if not self._state.is_authenticated:
            self._dispatch(ClearUserData())
            if self.session_store.failure_kind is not None:
                await self.cache.clear_user_scoped()
            return

        generation = self.session_store.generation
        for key in StorageKeys.USER_SCOPED:
            await self._publish_persisted(key, generation)
        await self.refresh_user_data()

    # -- session ------------------------------------------------------------

    async def login(self, email: str, password: str) -> Session:
        previous = self._state.session.identity
        session = await self.session_store.login(email, password)
        await self._signed_in(previous)
        return session

    async def register(self, request: RegisterRequest) -> Session:
        previous = self._state.session.identity
        session = await self.session_store.register(request)
        await self._signed_in(previous)
        return session

    async def logout(self) -> None:
        await self.session_store.logout()
        self._dispatch(ClearUserData())
        self._sync_session()
        await self.cache.clear_user_scoped()

    async def _signed_in(self, previous: Identity | None) -> None:
        current = self.session_store.session.identity
        if previous is None or current is None or previous.id != current.id:
            self._dispatch(ClearUserData())
            await self.cache.clear_user_scoped()
        self._sync_session()
        await self.refresh_user_data()
        await self._consume_pending_application()

    async def _guarded(self, call: Awaitable[T]) -> T:
        """Await ``call``; an authentication failure ends the session before re-raising."""

        try:
            return await call
        except AuthenticationError as exc:
            await self._handle_auth_failure(exc)
            raise

    async def _handle_auth_failure(self, exc: AuthenticationError) -> None:
        was_authenticated = self._state.is_authenticated
        await self.session_store.invalidate(exc.kind)
        self._dispatch(ClearUserData())
        self._sync_session()
        if was_authenticated:
            await self.cache.clear_user_scoped()

    # -- mutations ----------------------------------------------------------

    async def _single_flight(self, key: tuple[str, str], factory: Callable[[], Awaitable[T]]) -> T:
        """Share one in-flight call between identical concurrent requests."""

        if not self.settings.deduplicate_inflight_mutations:
            return await factory()

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task

            def forget(done: asyncio.Future) -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]

            task.add_done_callback(forget)
        else:
            log.debug("Joining in-flight %s for %s", *key)
        return await asyncio.shield(task)

    async def apply_to_job(
        self,
        job_id: str,
        cover_letter: str | None = None,
        resume_url: str | None = None,
    ) -> Application:
        """Network-first; a duplicate application raises DuplicateApplicationError."""

        return await self._single_flight(("apply", job_id), lambda: self._apply(job_id, cover_letter, resume_url))

    async def _apply(self, job_id: str, cover_letter: str | None, resume_url: str | None) -> Application:
        generation = self.session_store.generation
        record = await self._guarded(self.clients.applications.apply(job_id, cover_letter, resume_url))
        application = Application.from_record(record)
        log.info("Applied to job %s (application %s)", job_id, application.id)
        if self._session_ended(generation, f"application to job {job_id}"):
            return application
        self._dispatch(AddApplication(application))
        await self._persist(StorageKeys.APPLICATIONS, StorageKeys.APPLIED_JOBS)
        return application

    async def withdraw_application(self, application_id: str) -> None:
        generation = self.session_store.generation
        await self._guarded(self.clients.applications.withdraw(application_id))
        if self._session_ended(generation, f"withdrawal of application {application_id}"):
            return
        self._dispatch(RemoveApplication(application_id))
        await self._persist(StorageKeys.APPLICATIONS, StorageKeys.APPLIED_JOBS)

    async def save_job(self, job_id: str) -> SaveOutcome:
        """Idempotent: an "already saved" conflict converges without an error."""

        return await self._single_flight(("save", job_id), lambda: self._save(job_id))

    async def _save(self, job_id: str) -> SaveOutcome:
        generation = self.session_store.generation
        outcome = await self._guarded(self.clients.saved_jobs.save_job(job_id))
        if self._session_ended(generation, f"bookmark of job {job_id}"):
            return outcome
        self._dispatch(SaveJob(job_id))
        await self._persist(StorageKeys.SAVED_JOBS)
        return outcome

    async def unsave_job(self, job_id: str) -> None:
        await self._single_flight(("unsave", job_id), lambda: self._unsave(job_id))

    async def _unsave(self, job_id: str) -> None:
        generation = self.session_store.generation
        await self._guarded(self.clients.saved_jobs.unsave_job(job_id))
        if self._session_ended(generation, f"removed bookmark of job {job_id}"):
            return
        self._dispatch(UnsaveJob(job_id))
        await self._persist(StorageKeys.SAVED_JOBS)

    async def mark_notification_as_read(self, notification_id: str) -> bool:
        """Mark a notification read; returns whether the server confirmed it.

        Under ``ReadReceiptPolicy.LOCAL_FIRST`` the local flag is set even
        when the call fails, and the failure is only logged. This is the one
        mutation that does not wait for the server.
        """

        generation = self.session_store.generation
        try:
            await self._guarded(self.clients.notifications.mark_as_read(notification_id))
        except JobSyncError as exc:
            if self.settings.read_receipt_policy is ReadReceiptPolicy.NETWORK_FIRST:
                raise
            log.warning("Marking notification %s read failed, keeping it read locally: %s", notification_id, exc)
            confirmed = False
        else:
            confirmed = True

        if self._session_ended(generation, f"read receipt for notification {notification_id}"):
            return confirmed
        self._dispatch(MarkNotificationRead(notification_id))
        await self._persist(StorageKeys.NOTIFICATIONS)
        return confirmed

    def _session_ended(self, generation: int, what: str) -> bool:
        """True when the session that issued a call is gone; its result must not land."""

        if self.session_store.generation == generation:
            return False
        log.info("Discarding %s from an ended session", what)
        return True

    async def mark_all_notifications_read(self) -> int:
        """Mark every unread notification; returns how many the server confirmed."""

        unread = [item.id for item in self._state.notifications.items if not item.is_read]
        results = await asyncio.gather(
            *(self.mark_notification_as_read(notification_id) for notification_id in unread),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            raise failures[0]
        return sum(1 for result in results if result is True)

    async def update_profile(self, update: UpdateProfileRequest) -> UserProfile:
        profile = await self._guarded(self.clients.profile.update_profile(update))
        self.session_store.update_identity(
            Identity(id=profile.id, email=profile.email, name=profile.name, role=profile.role)
        )
        self._sync_session()
        return profile

    async def set_theme(self, theme: str) -> None:
        if theme not in ("light", "dark"):
            raise ValueError(f"Unknown theme: {theme!r}")
        self._dispatch(SetTheme(theme))
        await self.cache.save_theme(theme)

    async def toggle_theme(self) -> str:
        theme = "dark" if self._state.theme == "light" else "light"
        await self.set_theme(theme)
        return theme

    async def complete_onboarding(self) -> None:
        self._dispatch(SetOnboardingComplete(True))
        await self.cache.save_onboarding_complete(True)

    # -- pending application ------------------------------------------------

    async def queue_pending_application(self, job_id: str) -> None:
        """Remember a job picked while signed out, to apply after sign-in."""

        await self.store.set(StorageKeys.PENDING_APPLICATION, job_id)
        log.info("Saved pending job application: %s", job_id)

    async def apply_pending_application(self) -> Application | None:
        """Apply to the queued job, if any; a duplicate counts as done."""

        job_id = await self.store.get(StorageKeys.PENDING_APPLICATION)
        if not job_id:
            return None
        try:
            application = await self.apply_to_job(job_id)
        except DuplicateApplicationError:
            log.info("Pending application for job %s already exists", job_id)
            application = None
        await self.store.remove(StorageKeys.PENDING_APPLICATION)
        return application

    async def _consume_pending_application(self) -> None:
        # A failed attempt keeps the job queued for the next sign-in.
        try:
            await self.apply_pending_application()
        except JobSyncError as exc:
            log.warning("Pending job application failed: %s", exc)

    # -- queries ------------------------------------------------------------

    async def search_jobs(self, params: SearchParams | None = None) -> SearchResponse:
        return await self._guarded(self.clients.search.search_jobs(params))

    async def recommended_jobs(self, limit: int | None = None) -> list[Job]:
        return await self._guarded(self.clients.search.recommended_jobs(limit or self.settings.recommended_jobs_limit))
