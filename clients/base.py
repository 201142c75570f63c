"""Shared base for the per-domain API clients."""
from __future__ import annotations

from typing import Any

from clients.executor import RequestExecutor
from jobsync.schemas import parse_payload


class DomainClient:
    """A per-domain API client sitting on its own RequestExecutor."""

    def __init__(self, executor: RequestExecutor) -> None:
        self.executor = executor

    async def _call(self, schema: Any, path: str, method: str = "GET", body: Any = None, **options: Any) -> Any:
        payload = await self.executor.execute(path, method, body, **options)
        return parse_payload(schema, payload, f"{self.executor.domain} {method} {path}")
