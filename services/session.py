"""Authentication token and identity lifecycle."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from clients.auth import AuthClient
from jobsync.errors import AuthenticationError, AuthErrorKind, InvalidRequestError, JobSyncError
from jobsync.log import get_logger
from jobsync.schemas import AuthResponse, Identity, RegisterRequest
from jobsync.store import KeyValueStore, StorageKeys

log = get_logger(__name__)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VALIDATING = "validating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    token: str | None = None
    identity: Identity | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None


class SessionStore:
    """Owns the token and the identity validated for it in this process.

    ``generation`` increases on every transition into or out of
    ``AUTHENTICATED`` so that work started under an older session can tell
    it has been superseded.
    """

    def __init__(self, auth: AuthClient, store: KeyValueStore) -> None:
        self.auth = auth
        self.store = store
        self.state = SessionState.UNAUTHENTICATED
        self.session = Session()
        self.generation = 0
        self.failure_kind: AuthErrorKind | None = None

    @property
    def token(self) -> str | None:
        return self.session.token

    async def restore(self) -> Session:
        """Boot path: validate a persisted token, if there is one."""

        token = await self.store.get(StorageKeys.AUTH_TOKEN)
        if not token:
            log.info("No persisted session")
            return self.session

        self.state = SessionState.VALIDATING
        self.session = Session(token=token)
        try:
            identity = await self.auth.me()
        except AuthenticationError as exc:
            await self.invalidate(exc.kind)
            return self.session
        except InvalidRequestError as exc:
            # A 4xx such as "User not found" means the token names nobody valid.
            log.warning("Persisted session rejected: %s", exc)
            await self.invalidate(AuthErrorKind.AUTH_FAILED)
            return self.session
        except JobSyncError as exc:
            # The token could not be checked; keep it on disk for the next attempt.
            log.warning("Could not validate persisted session: %s", exc)
            self.state = SessionState.UNAUTHENTICATED
            self.session = Session()
            return self.session

        await self._authenticate(token, identity)
        log.info("Restored session for %s", identity.email)
        return self.session

    async def login(self, email: str, password: str) -> Session:
        response = await self.auth.login(email, password)
        await self._accept(response)
        log.info("Logged in as %s", response.user.email)
        return self.session

    async def register(self, request: RegisterRequest) -> Session:
        response = await self.auth.register(request)
        await self._accept(response)
        log.info("Registered %s", response.user.email)
        return self.session

    async def logout(self) -> None:
        self._clear()
        await self.store.remove_many([StorageKeys.AUTH_TOKEN, StorageKeys.IDENTITY])
        log.info("Logged out")

    async def invalidate(self, kind: AuthErrorKind) -> None:
        """Drop a token the server no longer accepts."""

        if self.state is SessionState.UNAUTHENTICATED and self.session.token is None:
            self.failure_kind = kind
            return
        log.warning("Session invalidated: %s", kind.value)
        self._clear()
        self.failure_kind = kind
        await self.store.remove_many([StorageKeys.AUTH_TOKEN, StorageKeys.IDENTITY])

    def update_identity(self, identity: Identity) -> None:
        if self.state is SessionState.AUTHENTICATED:
            self.session = Session(token=self.session.token, identity=identity)

    async def _accept(self, response: AuthResponse) -> None:
        await self._authenticate(response.token, response.user)
        await self.store.set(StorageKeys.AUTH_TOKEN, response.token)

    async def _authenticate(self, token: str, identity: Identity) -> None:
        self.state = SessionState.AUTHENTICATED
        self.session = Session(token=token, identity=identity)
        self.generation += 1
        self.failure_kind = None
        await self.store.set(StorageKeys.IDENTITY, identity.model_dump_json(by_alias=True))

    def _clear(self) -> None:
        if self.state is SessionState.AUTHENTICATED:
            self.generation += 1
        self.state = SessionState.UNAUTHENTICATED
        self.session = Session()
