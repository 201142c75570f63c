"""Job search, filter options and recommendations."""
from __future__ import annotations

from clients.base import DomainClient
from jobsync.schemas import FilterOptions, Job, SearchParams, SearchResponse


class SearchClient(DomainClient):
    async def search_jobs(self, params: SearchParams | None = None) -> SearchResponse:
        query = (params or SearchParams()).to_query()
        return await self._call(SearchResponse, "/search/jobs", params=query or None)

    async def search_by_query(self, query: str, limit: int = 20) -> list[Job]:
        response = await self.search_jobs(SearchParams(q=query, limit=limit))
        return response.jobs

    async def search_by_location(self, location: str, limit: int = 20) -> list[Job]:
        response = await self.search_jobs(SearchParams(location=location, limit=limit))
        return response.jobs

    async def search_remote_jobs(self, limit: int = 20) -> list[Job]:
        response = await self.search_jobs(SearchParams(is_remote=True, limit=limit))
        return response.jobs

    async def filter_options(self) -> FilterOptions:
        return await self._call(FilterOptions, "/jobs/filters")

    async def recommended_jobs(self, limit: int = 10) -> list[Job]:
        """Skill-based recommendations for the signed-in user."""

        return await self._call(list[Job], "/jobs/recommended", params={"limit": str(limit)}, requires_auth=True)
