"""Company directory."""
from __future__ import annotations

from clients.base import DomainClient
from jobsync.schemas import Company, CompanyJobsResponse, CompanyStats


class CompaniesClient(DomainClient):
    async def list_companies(self) -> list[Company]:
        return await self._call(list[Company], "/companies")

    async def get_company(self, company_id: str) -> Company:
        return await self._call(Company, f"/companies/{company_id}")

    async def company_jobs(self, company_id: str) -> CompanyJobsResponse:
        return await self._call(CompanyJobsResponse, f"/companies/{company_id}/jobs")

    async def search_companies(self, query: str) -> list[Company]:
        needle = query.lower()
        return [
            company
            for company in await self.list_companies()
            if needle in company.name.lower() or (company.industry and needle in company.industry.lower())
        ]

    async def featured_companies(self, limit: int = 10) -> list[Company]:
        companies = await self.list_companies()
        return companies[:limit]

    async def company_stats(self, company_id: str) -> CompanyStats:
        response = await self.company_jobs(company_id)
        return CompanyStats(total_jobs=response.total, active_jobs=len(response.jobs))
