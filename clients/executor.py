"""Fail-fast request execution across an ordered list of candidate origins."""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError

from jobsync.config import Settings
from jobsync.errors import (
    ApiError,
    AuthenticationError,
    AuthErrorKind,
    ServiceUnavailableError,
    error_from_response,
)
from jobsync.log import get_logger
from jobsync.schemas import ErrorEnvelope

log = get_logger(__name__)

TokenProvider = Callable[[], "str | None"]


class CallClass(str, Enum):
    STANDARD = "standard"
    PROBE = "probe"
    UPLOAD = "upload"


@dataclass(frozen=True)
class FallbackPolicy:
    """Ordered candidate origins plus the wait window for each call class.

    Each candidate is tried once; a transport failure moves on to the next
    one and nothing is retried against the same origin.
    """

    origins: tuple[str, ...]
    api_prefix: str = "/api"
    health_path: str = "/health"
    timeouts: dict[CallClass, float] = field(
        default_factory=lambda: {CallClass.STANDARD: 10.0, CallClass.PROBE: 3.0, CallClass.UPLOAD: 30.0}
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> FallbackPolicy:
        return cls(
            origins=tuple(origin.rstrip("/") for origin in settings.api_origins),
            api_prefix=settings.api_prefix,
            health_path=settings.health_path,
            timeouts={
                CallClass.STANDARD: settings.standard_timeout_seconds,
                CallClass.PROBE: settings.probe_timeout_seconds,
                CallClass.UPLOAD: settings.upload_timeout_seconds,
            },
        )

    def timeout_for(self, call_class: CallClass) -> float:
        return self.timeouts[call_class]

    def resource_urls(self, path: str) -> list[str]:
        return [f"{origin}{self.api_prefix}{path}" for origin in self.origins]

    def health_urls(self) -> list[str]:
        return [f"{origin}{self.health_path}" for origin in self.origins]


class RequestExecutor:
    """Turn one logical call into a single result or a single raised error."""

    def __init__(
        self,
        domain: str,
        policy: FallbackPolicy,
        http_client: httpx.AsyncClient,
        token_provider: TokenProvider,
    ) -> None:
        self.domain = domain
        self.policy = policy
        self.http_client = http_client
        self.token_provider = token_provider

    async def execute(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        *,
        requires_auth: bool = False,
        params: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
        call_class: CallClass = CallClass.STANDARD,
    ) -> Any:
        headers = self._headers(requires_auth)
        return await self._run(
            self.policy.resource_urls(path),
            method,
            headers=headers,
            body=body,
            params=params,
            files=files,
            call_class=call_class,
        )

    async def probe(self) -> Any:
        """Hit the unauthenticated liveness path with the short probe window."""

        return await self._run(self.policy.health_urls(), "GET", headers={}, call_class=CallClass.PROBE)

    def _headers(self, requires_auth: bool) -> dict[str, str]:
        token = self.token_provider()
        if token:
            return {"Authorization": f"Bearer {token}"}
        if requires_auth:
            raise AuthenticationError(AuthErrorKind.NO_TOKEN, "No token provided")
        return {}

    async def _run(
        self,
        urls: list[str],
        method: str,
        *,
        headers: dict[str, str],
        body: Any = None,
        params: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
        call_class: CallClass,
    ) -> Any:
        timeout = self.policy.timeout_for(call_class)
        last_error: BaseException | None = None

        for index, url in enumerate(urls):
            log.debug("%s API request: %s %s", self.domain, method, url)
            try:
                response = await asyncio.wait_for(
                    self.http_client.request(
                        method,
                        url,
                        json=body if files is None else None,
                        data=body if files is not None else None,
                        params=params,
                        files=files,
                        headers=headers,
                        timeout=timeout,
                    ),
                    timeout=timeout,
                )
            except (httpx.RequestError, asyncio.TimeoutError) as exc:
                last_error = exc
                self._log_candidate_failure(index, len(urls), url, exc)
                continue

            if response.is_success:
                try:
                    return response.json() if response.content else None
                except ValueError as exc:
                    last_error = exc
                    self._log_candidate_failure(index, len(urls), url, exc)
                    continue

            raise self._error_for(response)

        log.error("All %s API endpoints failed for %s: %s", self.domain, method, last_error)
        raise ServiceUnavailableError(self.domain, last_error) from last_error

    def _log_candidate_failure(self, index: int, total: int, url: str, exc: BaseException) -> None:
        reason = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
        if index < total - 1:
            log.warning("%s API request failed for %s (%s), trying next candidate", self.domain, url, reason)
        else:
            log.warning("%s API request failed for %s (%s)", self.domain, url, reason)

    def _error_for(self, response: httpx.Response) -> ApiError:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        try:
            envelope = ErrorEnvelope.model_validate(payload)
        except ValidationError:
            envelope = ErrorEnvelope()
        error = error_from_response(response.status_code, envelope.message, envelope.code, payload)
        log.info(
            "%s API %s %s -> %d %s",
            self.domain,
            response.request.method,
            response.request.url.path,
            response.status_code,
            envelope.message or "",
        )
        return error
