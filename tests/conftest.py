import os
from contextlib import contextmanager
from typing import AsyncGenerator

# Settings are cached on first use, so the test environment must be in place
# before anything imports libs.common.config.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["ENVIRONMENT"] = "test"
for _key in (
    "SMTP_USERNAME",
    "SMTP_PASSWORD",
    "STRIPE_SECRET_KEY",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
):
    os.environ[_key] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.config import build_engine, build_session_factory
from libs.db.session import get_async_db
from services.store_service.app.main import app

get_settings.cache_clear()
settings = get_settings()


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def make_customer_user(user_id: int, email: str = "customer@example.com") -> AuthUser:
    return AuthUser(user_id=user_id, email=email, role="customer")


def make_admin_user(user_id: int, email: str = "admin@example.com") -> AuthUser:
    return AuthUser(user_id=user_id, email=email, role="admin")


@contextmanager
def override_auth(target_app, user: AuthUser):
    """Temporarily authenticate every request to ``target_app`` as ``user``."""
    previous = target_app.dependency_overrides.get(get_current_user)
    target_app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            target_app.dependency_overrides.pop(get_current_user, None)
        else:
            target_app.dependency_overrides[get_current_user] = previous


# ---------------------------------------------------------------------------
# Database / client fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory database per test.

    StaticPool keeps the single in-memory connection alive for the whole
    test, so every session sees the same tables.
    """
    engine = build_engine(settings, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session = build_session_factory(test_engine)()
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the store app with the DB dependency
    pointed at the test session.
    """
    app.dependency_overrides[get_async_db] = lambda: db_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def store_app():
    return app
