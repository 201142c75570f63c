import httpx
import pytest
import pytest_asyncio

from jobsync.config import Settings
from jobsync.database import build_engine, build_sessionmaker, init_models
from jobsync.dependencies import build_synchronizer
from jobsync.store import KeyValueStore
from tests.fake_api import CandidateTransport, FakeBackend, create_fake_api

PRIMARY = "primary.test"
FALLBACK = "fallback.test"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        api_origins=[f"http://{PRIMARY}", f"http://{FALLBACK}/"],
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'jobsync.db'}",
        data_directory=tmp_path,
        standard_timeout_seconds=0.5,
        probe_timeout_seconds=0.2,
        upload_timeout_seconds=1.0,
    )


@pytest_asyncio.fixture
async def store(settings):
    engine = build_engine(settings.database_url)
    await init_models(engine)
    yield KeyValueStore(build_sessionmaker(engine))
    await engine.dispose()


@pytest.fixture
def backend():
    return FakeBackend.seeded()


@pytest.fixture
def transport(backend):
    return CandidateTransport(create_fake_api(backend))


@pytest_asyncio.fixture
async def http_client(transport):
    async with httpx.AsyncClient(transport=transport) as client:
        yield client


@pytest.fixture
def make_synchronizer(settings, store, http_client):
    """Build a fresh synchronizer over the same store, like a process restart."""

    def factory(**overrides):
        effective = settings.model_copy(update=overrides) if overrides else settings
        return build_synchronizer(effective, store, http_client)

    return factory


@pytest.fixture
def synchronizer(make_synchronizer):
    return make_synchronizer()


@pytest.fixture
def valid_token(backend):
    backend.tokens["valid-token"] = "u1"
    return "valid-token"
