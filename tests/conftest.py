import os
import sys
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession

# Add the app directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./salonpro_test.db")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
# Empty values win over a developer .env: no Redis, request-derived links
os.environ["REDIS_URL"] = ""
os.environ["PUBLIC_BASE_URL"] = ""

from app.core.config import settings  # noqa: E402
from app.core.database import Base, build_engine, build_sessionmaker, get_db  # noqa: E402
from app.main import app  # noqa: E402
from tests.fixtures.salon_fixtures import FixedClock, TEST_NOW  # noqa: E402


@pytest.fixture
async def db(tmp_path):
    """Create a fresh database session for each test."""
    test_database_url = os.getenv(
        "TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/test.db"
    )
    engine = build_engine(test_database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)  # Clean slate
        await conn.run_sync(Base.metadata.create_all)

    async_session = build_sessionmaker(engine)

    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture(autouse=True)
def override_get_db(db: AsyncSession):
    """Override the get_db dependency to use test database."""

    async def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TEST_NOW)


@pytest.fixture(autouse=True)
def app_clock(clock: FixedClock):
    """Pin the application's notion of "now"."""
    original = app.state.clock
    app.state.clock = clock
    yield clock
    app.state.clock = original


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


# Test Authentication Utilities
def get_auth_headers(subject: str, role: str = "business", **claims) -> dict[str, str]:
    """Sign a bearer token the way the identity provider would."""
    payload = {
        "sub": subject,
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


# Import all salon fixtures to make them available
pytest_plugins = ["tests.fixtures.salon_fixtures"]
