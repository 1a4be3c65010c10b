from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from src.api.main import create_app
from src.core.auth import create_access_token
from src.core.config import Settings, get_settings
from src.domain.services.notifications import Notifier
from src.infrastructure.db.base import Base


@pytest.fixture()
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'learnhub.db'}", future=True)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
def settings() -> Settings:
    return get_settings()


@pytest.fixture()
async def app(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> AsyncIterator[FastAPI]:
    application = create_app(settings=settings, session_factory=session_factory)
    yield application
    await application.state.notifier.drain()


@pytest.fixture()
def notifier(app: FastAPI) -> Notifier:
    """The notifier the app under test dispatches to."""
    return app.state.notifier


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a database session for tests that need direct DB access."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def admin_token() -> str:
    """Generate admin JWT token for testing."""
    return create_access_token("admin-user", roles=["admin"])


@pytest.fixture()
def employee_token() -> str:
    """Generate employee JWT token for testing."""
    return create_access_token("employee-user", roles=["employee"])
