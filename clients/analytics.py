"""Personal analytics for the signed-in user."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from clients.base import DomainClient
from jobsync.schemas import ApplicationStats, DashboardStats, JobStats, UserActivityStats, UserPerformance


class AnalyticsClient(DomainClient):
    async def application_stats(self) -> ApplicationStats:
        return await self._call(ApplicationStats, "/analytics/applications", requires_auth=True)

    async def job_stats(self) -> JobStats:
        return await self._call(JobStats, "/analytics/jobs", requires_auth=True)

    async def user_stats(self) -> UserActivityStats:
        return await self._call(UserActivityStats, "/analytics/user", requires_auth=True)

    async def dashboard(self) -> DashboardStats:
        """All three stat blocks; any failure fails the whole dashboard."""

        applications, jobs, user = await asyncio.gather(
            self.application_stats(),
            self.job_stats(),
            self.user_stats(),
        )
        return DashboardStats(
            applications=applications,
            jobs=jobs,
            user=user,
            last_updated=datetime.now(timezone.utc),
        )

    async def performance(self) -> UserPerformance:
        applications, user = await asyncio.gather(self.application_stats(), self.user_stats())

        suggestions: list[str] = []
        if user.profile_completion_rate < 80:
            suggestions.append("Complete your profile to increase visibility")
        if applications.success_rate < 0.1:
            suggestions.append("Consider improving your application materials")
        if applications.average_response_time > 7:
            suggestions.append("Try applying to more recent job postings")

        return UserPerformance(
            profile_completion=user.profile_completion_rate,
            application_success_rate=applications.success_rate,
            average_response_time=applications.average_response_time,
            most_active_time=f"{user.most_active_hours[0]}:00" if user.most_active_hours else "Unknown",
            improvement_suggestions=suggestions,
        )
