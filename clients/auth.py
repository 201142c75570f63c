"""Authentication endpoints."""
from __future__ import annotations

from clients.base import DomainClient
from jobsync.schemas import AuthResponse, HealthStatus, Identity, LoginRequest, RegisterRequest, parse_payload


class AuthClient(DomainClient):
    async def login(self, email: str, password: str) -> AuthResponse:
        credentials = LoginRequest(email=email, password=password)
        return await self._call(AuthResponse, "/auth/login", "POST", credentials.to_wire())

    async def register(self, request: RegisterRequest) -> AuthResponse:
        return await self._call(AuthResponse, "/auth/register", "POST", request.to_wire())

    async def me(self) -> Identity:
        """Validate the current token and return the identity it belongs to."""

        return await self._call(Identity, "/auth/me", requires_auth=True)

    async def health(self) -> HealthStatus:
        payload = await self.executor.probe()
        return parse_payload(HealthStatus, payload, "health check")
