from datetime import datetime, timezone

import pytest

from jobsync.schemas import Application, Identity, Job, Notification
from jobsync.store import StorageKeys
from services.cache import CachedCollection, CacheSource
from services.session import Session
from services.state import (
    AddApplication,
    AppState,
    ClearUserData,
    FlagsLoaded,
    MarkNotificationRead,
    PublishCollection,
    RemoveApplication,
    SaveJob,
    SetSession,
    UnsaveJob,
    reduce,
)

APPLIED_AT = datetime(2026, 10, 1, tzinfo=timezone.utc)


def application(application_id: str, job_id: str) -> Application:
    return Application(id=application_id, job_id=job_id, applied_at=APPLIED_AT)


def notification(notification_id: str, is_read: bool = False) -> Notification:
    return Notification(id=notification_id, title="t", message="m", is_read=is_read)


def test_initial_state():
    state = AppState()

    assert state.is_loading
    assert state.theme == "light"
    assert not state.is_authenticated
    assert state.unread_count == 0


def test_state_is_never_mutated_in_place():
    before = AppState()

    after = reduce(before, FlagsLoaded(onboarding_complete=True, theme="dark"))

    assert before.theme == "light"
    assert after.theme == "dark"
    assert after.onboarding_complete


def test_set_session():
    session = Session(token="t", identity=Identity(id="u1", email="a@x.com", name="A", role="employee"))

    state = reduce(AppState(), SetSession(session))

    assert state.is_authenticated
    assert state.auth_error is None


class TestPublishCollection:
    def test_network_snapshot_replaces_persisted(self):
        persisted = CachedCollection((Job(id="old"),), CacheSource.PERSISTED)
        state = reduce(AppState(), PublishCollection(StorageKeys.JOBS, persisted))

        state = reduce(state, PublishCollection(StorageKeys.JOBS, CachedCollection.from_network([Job(id="new")])))

        assert [job.id for job in state.jobs.items] == ["new"]
        assert state.jobs.source is CacheSource.NETWORK

    def test_late_persisted_snapshot_does_not_overwrite_network(self):
        state = reduce(
            AppState(), PublishCollection(StorageKeys.JOBS, CachedCollection.from_network([Job(id="new")]))
        )

        state = reduce(
            state, PublishCollection(StorageKeys.JOBS, CachedCollection((Job(id="old"),), CacheSource.PERSISTED))
        )

        assert [job.id for job in state.jobs.items] == ["new"]


class TestApplications:
    def test_add_records_job_as_applied(self):
        state = reduce(AppState(), AddApplication(application("app_1", "job_7")))

        assert [a.id for a in state.applications.items] == ["app_1"]
        assert state.applied_job_ids.items == ("job_7",)

    def test_add_with_same_id_replaces(self):
        state = reduce(AppState(), AddApplication(application("app_1", "job_7")))
        state = reduce(state, AddApplication(application("app_1", "job_7")))

        assert len(state.applications) == 1
        assert state.applied_job_ids.items == ("job_7",)

    def test_remove(self):
        state = reduce(AppState(), AddApplication(application("app_1", "job_7")))
        state = reduce(state, AddApplication(application("app_2", "job_1")))

        state = reduce(state, RemoveApplication("app_1"))

        assert [a.id for a in state.applications.items] == ["app_2"]
        assert state.applied_job_ids.items == ("job_1",)


class TestSavedJobs:
    def test_save_is_a_set_insert(self):
        state = reduce(AppState(), SaveJob("job_42"))
        state = reduce(state, SaveJob("job_42"))

        assert state.saved_job_ids.items == ("job_42",)

    def test_unsave(self):
        state = reduce(reduce(AppState(), SaveJob("job_42")), UnsaveJob("job_42"))

        assert state.saved_job_ids.items == ()


def test_mark_notification_read():
    collection = CachedCollection.from_network([notification("n1"), notification("n2")])
    state = reduce(AppState(), PublishCollection(StorageKeys.NOTIFICATIONS, collection))

    state = reduce(state, MarkNotificationRead("n2"))

    assert [n.is_read for n in state.notifications.items] == [False, True]
    assert state.unread_count == 1
    assert state.notifications.last_refreshed == collection.last_refreshed


def test_clear_user_data_keeps_jobs_and_flags():
    state = reduce(AppState(), FlagsLoaded(onboarding_complete=True, theme="dark"))
    state = reduce(state, PublishCollection(StorageKeys.JOBS, CachedCollection.from_network([Job(id="job_1")])))
    state = reduce(state, SaveJob("job_1"))
    state = reduce(state, AddApplication(application("app_1", "job_1")))

    state = reduce(state, ClearUserData())

    assert len(state.jobs) == 1
    assert state.theme == "dark"
    assert len(state.applications) == 0
    assert len(state.saved_job_ids) == 0
    assert len(state.applied_job_ids) == 0
    assert state.applications.source is CacheSource.NETWORK


def test_unknown_action():
    with pytest.raises(TypeError):
        reduce(AppState(), object())
