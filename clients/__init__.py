"""Per-domain API clients sharing one fallback policy."""
from __future__ import annotations

from dataclasses import dataclass

import httpx

from .analytics import AnalyticsClient
from .applications import ApplicationsClient
from .auth import AuthClient
from .companies import CompaniesClient
from .executor import CallClass, FallbackPolicy, RequestExecutor, TokenProvider
from .jobs import JobsClient
from .notifications import NotificationsClient
from .profile import ProfileClient
from .saved_jobs import SavedJobsClient, SaveOutcome
from .search import SearchClient

__all__ = [
    "AnalyticsClient",
    "ApiClients",
    "ApplicationsClient",
    "AuthClient",
    "CallClass",
    "CompaniesClient",
    "FallbackPolicy",
    "JobsClient",
    "NotificationsClient",
    "ProfileClient",
    "RequestExecutor",
    "SaveOutcome",
    "SavedJobsClient",
    "SearchClient",
    "build_clients",
]


@dataclass(frozen=True)
class ApiClients:
    auth: AuthClient
    jobs: JobsClient
    applications: ApplicationsClient
    saved_jobs: SavedJobsClient
    notifications: NotificationsClient
    search: SearchClient
    profile: ProfileClient
    companies: CompaniesClient
    analytics: AnalyticsClient


def build_clients(
    policy: FallbackPolicy,
    http_client: httpx.AsyncClient,
    token_provider: TokenProvider,
) -> ApiClients:
    """One executor per domain, all on the same policy and connection pool."""

    def executor(domain: str) -> RequestExecutor:
        return RequestExecutor(domain, policy, http_client, token_provider)

    return ApiClients(
        auth=AuthClient(executor("auth")),
        jobs=JobsClient(executor("jobs")),
        applications=ApplicationsClient(executor("applications")),
        saved_jobs=SavedJobsClient(executor("saved jobs")),
        notifications=NotificationsClient(executor("notifications")),
        search=SearchClient(executor("search")),
        profile=ProfileClient(executor("profile")),
        companies=CompaniesClient(executor("companies")),
        analytics=AnalyticsClient(executor("analytics")),
    )
