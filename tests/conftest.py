"""
Pytest Configuration and Fixtures

Shared fixtures: in-memory SQLite engines, fake extraction collaborators
and a FastAPI TestClient wired to both.
"""

import os

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Test environment defaults - MUST be before any thoughtstream imports.
#
# 1. Load .env first so local overrides are visible.
# 2. setdefault keeps the suite off the developer's real database file.
# ---------------------------------------------------------------------------
load_dotenv()  # .env -> os.environ (no-op if file is missing)

_test_env = {
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "SPEECH_AUTHORIZED": "true",
    "LOG_LEVEL": "WARNING",
}
for _key, _value in _test_env.items():
    os.environ.setdefault(_key, _value)

# ---------------------------------------------------------------------------
# Imports (safe now that env vars are set)
# ---------------------------------------------------------------------------
import time  # noqa: E402
from collections.abc import AsyncGenerator, Generator  # noqa: E402
from unittest.mock import patch  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from thoughtstream.core.database import (  # noqa: E402
    enable_sqlite_foreign_keys,
    get_db,
    init_db,
)
from thoughtstream.main import app  # noqa: E402
from thoughtstream.services.capture import (  # noqa: E402
    NoteCaptureService,
    get_capture_service,
)

from fakes import FakeExtractor  # noqa: E402


def make_engine() -> AsyncEngine:
    """Fresh in-memory database shared by every session of one test."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    return engine


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def image_extractor() -> FakeExtractor:
    return FakeExtractor("receipt total 42")


@pytest.fixture
def document_extractor() -> FakeExtractor:
    return FakeExtractor("quarterly report")


@pytest.fixture
def transcriber() -> FakeExtractor:
    return FakeExtractor("call the dentist")


@pytest.fixture
def capture_service(
    image_extractor: FakeExtractor,
    document_extractor: FakeExtractor,
    transcriber: FakeExtractor,
) -> NoteCaptureService:
    """Capture service wired to fake extractors."""
    return NoteCaptureService(
        image_extractor=image_extractor,
        document_extractor=document_extractor,
        transcriber=transcriber,
        extraction_timeout=5.0,
    )


@pytest_asyncio.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a freshly created in-memory schema."""
    engine = make_engine()
    await init_db(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db_session:
        yield db_session
    await engine.dispose()


@pytest.fixture
def client(capture_service: NoteCaptureService) -> Generator[TestClient, None, None]:
    """
    TestClient with the database and extractors overridden.

    The engine is created here but only connects inside the TestClient's
    event loop, where the patched lifespan creates the schema.
    """
    engine = make_engine()
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as db_session:
            yield db_session

    async def _init_db() -> None:
        await init_db(engine)

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_capture_service] = lambda: capture_service

    with (
        patch("thoughtstream.main.init_db", _init_db),
        patch("thoughtstream.main.dispose_engine", engine.dispose),
    ):
        with TestClient(app) as test_client:
            yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Live stack fixtures (pytest -m live)
# ---------------------------------------------------------------------------

BASE_URL = os.getenv("THOUGHTSTREAM_URL", "http://localhost:8000")


@pytest.fixture(scope="session")
def wait_for_api():
    """
    Block until a running API answers /health or the timeout expires.

    Polls with 1s intervals for up to 30s.
    """
    url = f"{BASE_URL}/health"
    timeout = 30
    start = time.time()

    while time.time() - start < timeout:
        try:
            res = httpx.get(url, timeout=1.0)
            if res.status_code == 200:
                return
        except httpx.RequestError:
            time.sleep(1)

    pytest.fail(f"API unreachable at {BASE_URL}. Is uvicorn running?")


@pytest.fixture(scope="session")
def api_client(wait_for_api) -> Generator[httpx.Client, None, None]:
    """HTTP client for a running server, based at /api/v1."""
    with httpx.Client(base_url=f"{BASE_URL}/api/v1", timeout=30.0) as http:
        yield http
