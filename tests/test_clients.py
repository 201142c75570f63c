import pytest

from clients import FallbackPolicy, SaveOutcome, build_clients
from jobsync.errors import DuplicateApplicationError, InvalidRequestError, ResponseSchemaError
from jobsync.schemas import (
    ApplicationStatus,
    RegisterRequest,
    SearchParams,
    UpdateApplicationRequest,
    UpdateProfileRequest,
)


@pytest.fixture
def clients(settings, http_client, valid_token):
    return build_clients(FallbackPolicy.from_settings(settings), http_client, lambda: valid_token)


class TestJobs:
    @pytest.mark.asyncio
    async def test_unknown_fields_pass_through(self, clients):
        job = await clients.jobs.get_job("job_7")

        assert job.id == "job_7"
        assert job.model_extra["title"] == "Role job_7"
        assert job.model_extra["isRemote"] is True

    @pytest.mark.asyncio
    async def test_numeric_ids_become_strings(self, clients, backend):
        backend.jobs = [{"id": 99, "title": "Numeric"}]

        jobs = await clients.jobs.list_jobs()

        assert jobs[0].id == "99"

    @pytest.mark.asyncio
    async def test_payload_without_id_is_rejected(self, clients, backend):
        backend.jobs = [{"title": "No id"}]

        with pytest.raises(ResponseSchemaError):
            await clients.jobs.list_jobs()

    @pytest.mark.asyncio
    async def test_missing_job_is_a_validation_error(self, clients):
        with pytest.raises(InvalidRequestError) as excinfo:
            await clients.jobs.get_job("nope")

        assert excinfo.value.status_code == 404
        assert excinfo.value.message == "Job not found"


class TestAuth:
    @pytest.mark.asyncio
    async def test_register_returns_token_and_identity(self, clients, backend):
        response = await clients.auth.register(RegisterRequest(email="b@x.com", password="pw", name="B"))

        assert response.user.email == "b@x.com"
        assert response.user.role == "employee"
        assert backend.tokens[response.token] == response.user.id


class TestApplications:
    @pytest.mark.asyncio
    async def test_apply_then_list(self, clients):
        record = await clients.applications.apply("job_7", cover_letter="Hello")

        assert record.job_id == "job_7"
        assert record.status is ApplicationStatus.PENDING
        assert [a.id for a in await clients.applications.list_applications()] == [record.id]
        assert await clients.applications.has_applied("job_7")
        assert not await clients.applications.has_applied("job_1")

    @pytest.mark.asyncio
    async def test_second_apply_is_duplicate(self, clients):
        await clients.applications.apply("job_7")

        with pytest.raises(DuplicateApplicationError) as excinfo:
            await clients.applications.apply("job_7")

        assert excinfo.value.job_id == "job_7"
        assert excinfo.value.status_code == 409

    @pytest.mark.asyncio
    async def test_update_and_withdraw(self, clients):
        record = await clients.applications.apply("job_1")

        updated = await clients.applications.update_application(
            record.id, UpdateApplicationRequest(status=ApplicationStatus.REVIEWED)
        )
        assert updated.status is ApplicationStatus.REVIEWED
        assert [a.id for a in await clients.applications.list_for_job("job_1")] == [record.id]

        await clients.applications.withdraw(record.id)
        assert await clients.applications.list_applications() == []


class TestSavedJobs:
    @pytest.mark.asyncio
    async def test_save_twice_converges(self, clients):
        assert await clients.saved_jobs.save_job("job_42") is SaveOutcome.SAVED
        assert await clients.saved_jobs.save_job("job_42") is SaveOutcome.ALREADY_SAVED
        assert await clients.saved_jobs.saved_job_ids() == ["job_42"]

    @pytest.mark.asyncio
    async def test_listing_keys_bookmarks_by_job_id(self, clients, backend):
        backend.saved["u1"] = ["job_42", "job_7"]

        records = await clients.saved_jobs.list_saved_jobs()

        assert [record.id for record in records] == ["sv_1", "sv_2"]
        assert [record.job.id for record in records] == ["job_42", "job_7"]
        assert await clients.saved_jobs.saved_job_ids() == ["job_42", "job_7"]

    @pytest.mark.asyncio
    async def test_unsave(self, clients):
        await clients.saved_jobs.save_job("job_1")
        await clients.saved_jobs.unsave_job("job_1")

        assert await clients.saved_jobs.saved_job_ids() == []


class TestNotifications:
    @pytest.mark.asyncio
    async def test_list_and_mark_read(self, clients):
        notifications = await clients.notifications.list_notifications()
        assert [n.id for n in notifications] == ["n3", "n2", "n1"]
        assert await clients.notifications.unread_count() == 3

        await clients.notifications.mark_as_read("n2")

        assert await clients.notifications.unread_count() == 2


class TestSearch:
    def test_query_uses_wire_names(self):
        params = SearchParams(q="Role", is_remote=True, salary_min=50000, sort_by="date")

        assert params.to_query() == {"q": "Role", "isRemote": "true", "salaryMin": "50000", "sortBy": "date"}

    def test_empty_values_are_dropped(self):
        assert SearchParams(q="", location=None).to_query() == {}

    @pytest.mark.asyncio
    async def test_search_jobs(self, clients):
        response = await clients.search.search_jobs(SearchParams(q="job_4"))

        assert [job.id for job in response.jobs] == ["job_42"]
        assert response.total == 1

    @pytest.mark.asyncio
    async def test_search_helpers(self, clients):
        assert len(await clients.search.search_remote_jobs(limit=2)) == 2
        assert [job.id for job in await clients.search.search_by_query("job_1")] == ["job_1"]

    @pytest.mark.asyncio
    async def test_filter_options(self, clients):
        options = await clients.search.filter_options()

        assert options.job_types == ["Full-time", "Contract"]
        assert options.salary_ranges[0].max == 80000

    @pytest.mark.asyncio
    async def test_recommended_jobs_honours_limit(self, clients):
        assert len(await clients.search.recommended_jobs(limit=3)) == 3


class TestProfile:
    @pytest.mark.asyncio
    async def test_update_profile(self, clients):
        profile = await clients.profile.update_profile(UpdateProfileRequest(name="Ada"))

        assert profile.name == "Ada"
        assert profile.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_skills(self, clients):
        await clients.profile.update_skills(["python"])
        assert (await clients.profile.add_skill("sql")).skills == ["python", "sql"]
        assert (await clients.profile.add_skill("sql")).skills == ["python", "sql"]
        assert (await clients.profile.remove_skill("python")).skills == ["sql"]

    @pytest.mark.asyncio
    async def test_upload_resume(self, clients, backend, tmp_path):
        resume = tmp_path / "cv.pdf"
        resume.write_bytes(b"%PDF-1.4 resume")

        response = await clients.profile.upload_resume(resume)

        assert response.resume_url == "/uploads/u1/cv.pdf"
        assert backend.uploads == [("resume", "cv.pdf", b"%PDF-1.4 resume")]


class TestCompanies:
    @pytest.mark.asyncio
    async def test_search_matches_name_or_industry(self, clients):
        assert [c.id for c in await clients.companies.search_companies("glob")] == ["c2"]
        assert [c.id for c in await clients.companies.search_companies("software")] == ["c1"]

    @pytest.mark.asyncio
    async def test_featured_companies(self, clients):
        assert [c.id for c in await clients.companies.featured_companies(limit=1)] == ["c1"]

    @pytest.mark.asyncio
    async def test_company_stats(self, clients):
        stats = await clients.companies.company_stats("c1")

        assert stats.total_jobs == 4
        assert stats.active_jobs == 4


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_dashboard_combines_all_blocks(self, clients):
        await clients.applications.apply("job_1")

        dashboard = await clients.analytics.dashboard()

        assert dashboard.applications.total_applications == 1
        assert dashboard.jobs.total_jobs_viewed == 12
        assert dashboard.user.total_sessions == 4

    @pytest.mark.asyncio
    async def test_dashboard_fails_as_a_whole(self, clients, backend):
        backend.fail("GET /api/analytics/jobs", 400, {"message": "bad range"})

        with pytest.raises(InvalidRequestError):
            await clients.analytics.dashboard()

    @pytest.mark.asyncio
    async def test_performance_suggestions(self, clients):
        performance = await clients.analytics.performance()

        assert performance.most_active_time == "9:00"
        assert performance.improvement_suggestions == [
            "Complete your profile to increase visibility",
            "Consider improving your application materials",
        ]
