"""Error taxonomy shared by the executor, the clients and the synchronizer."""
from __future__ import annotations

from enum import Enum
from typing import Any


class AuthErrorKind(str, Enum):
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_NOT_ACTIVE = "TOKEN_NOT_ACTIVE"
    NO_TOKEN = "NO_TOKEN"
    AUTH_FAILED = "AUTH_FAILED"


class JobSyncError(Exception):
    """Base class for every failure the access layer reports."""


class ServiceUnavailableError(JobSyncError):
    """Every candidate location failed at the transport level."""

    def __init__(self, domain: str, last_cause: BaseException | None) -> None:
        self.domain = domain
        self.last_cause = last_cause
        detail = f"{type(last_cause).__name__}: {last_cause}" if last_cause else "no candidates configured"
        super().__init__(f"All {domain} API endpoints failed. Last error: {detail}")


class ResponseSchemaError(JobSyncError):
    """A successful response whose body does not match the expected schema."""

    def __init__(self, context: str, detail: str) -> None:
        self.context = context
        super().__init__(f"Unexpected {context} payload: {detail}")


class ApiError(JobSyncError):
    """Non-2xx response carrying the server's error envelope."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        code: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.code = code
        self.payload = payload or {}
        super().__init__(message)


class AuthenticationError(ApiError):
    def __init__(
        self,
        kind: AuthErrorKind,
        message: str | None = None,
        *,
        status_code: int = 401,
        payload: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        super().__init__(status_code, message or kind.value, code=kind.value, payload=payload)


class InvalidRequestError(ApiError):
    """4xx rejection that is not about authentication."""


class ConflictError(ApiError):
    """409 from an endpoint with a uniqueness constraint."""


class DuplicateApplicationError(ConflictError):
    """The current user already has a live application for the job."""

    def __init__(self, job_id: str, message: str | None = None, payload: dict[str, Any] | None = None) -> None:
        self.job_id = job_id
        super().__init__(409, message or f"Already applied to job {job_id}", code="DUPLICATE_APPLICATION", payload=payload)


class ServerError(ApiError):
    """5xx from the remote API."""


def error_from_response(status_code: int, message: str | None, code: str | None, payload: dict[str, Any]) -> ApiError:
    """Map a status code and error envelope onto the taxonomy."""

    if code in AuthErrorKind._value2member_map_:
        return AuthenticationError(AuthErrorKind(code), message, status_code=status_code, payload=payload)
    if status_code == 401:
        if message and "no token" in message.lower():
            kind = AuthErrorKind.NO_TOKEN
        else:
            kind = AuthErrorKind.AUTH_FAILED
        return AuthenticationError(kind, message, status_code=status_code, payload=payload)
    if status_code == 409:
        return ConflictError(status_code, message or "Conflict", code=code, payload=payload)
    if status_code >= 500:
        return ServerError(status_code, "Internal server error", code=code, payload=payload)
    return InvalidRequestError(status_code, message or f"HTTP error! status: {status_code}", code=code, payload=payload)
