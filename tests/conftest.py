import os
# Disable DB SSL and Rate Limiting for all tests BEFORE any app imports
os.environ["DB_SSL_MODE"] = "disable"
os.environ["RATELIMIT_ENABLED"] = "False"
os.environ["ENVIRONMENT"] = "development"
os.environ["TESTING"] = "True"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-jwt-secret-0123456789abcdef0123"
os.environ["ENCRYPTION_KEY"] = "test-encryption-key-0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENABLE_SEED_ENDPOINTS"] = "True"

import pytest
from datetime import datetime, timezone
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

# Ensure all models are registered in the metadata for SQLAlchemy mappers
from app.models.user import User  # noqa: F401
from app.models.alert_settings import AlertSettings  # noqa: F401
from app.models.cloud_connection import CloudConnection  # noqa: F401
from app.models.metric import MetricSample
from app.models.alert import Alert  # noqa: F401
from app.shared.db.base import Base
from app.shared.db.session import get_db

NOW = datetime(2026, 3, 15, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Fresh in-memory database per test.
    StaticPool keeps the single SQLite connection (and its data) alive.
    """
    test_engine = create_async_engine(
        os.environ["DATABASE_URL"],
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=test_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await test_engine.dispose()


@pytest.fixture
async def ac(db) -> AsyncGenerator[AsyncClient, None]:
    """Async client fixture for testing API endpoints against the test session."""
    from app.main import app

    async def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    # Unhandled errors should surface as the 500 envelope, not propagate into the test
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def user_and_token(db):
    from app.modules.accounts.domain.users import UserService
    return await UserService(db).signup("Ada", "ada@example.com", "secret123")


@pytest.fixture
def user(user_and_token):
    return user_and_token[0]


@pytest.fixture
def auth_headers(user_and_token):
    return {"Authorization": f"Bearer {user_and_token[1]}"}


@pytest.fixture
async def other_user(db):
    from app.modules.accounts.domain.users import UserService
    other, _ = await UserService(db).signup("Grace", "grace@example.com", "secret456")
    return other


def make_sample(user_id, provider="aws", metric_type="cpu", value=50.0, timestamp=None, unit=None, **kwargs):
    from app.shared.core.constants import METRIC_UNITS
    return MetricSample(
        user_id=user_id,
        provider=provider,
        metric_type=metric_type,
        value=value,
        unit=unit or METRIC_UNITS.get(metric_type, "status"),
        timestamp=timestamp or NOW,
        **kwargs,
    )
