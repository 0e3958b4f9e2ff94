"""
Shared test fixtures — in-memory SQLite async database + FastAPI AsyncClient.

Strategy:
1. Set DATABASE_URL to SQLite before anything loads
2. Build a fresh in-memory engine per test (one shared connection via StaticPool)
3. Point get_session / get_notifier at the test engine and a recording notifier
"""
import os
from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# ── 1. Environment ──
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DEBUG"] = "false"
os.environ["UPLOAD_SERVICE_URL"] = ""
os.environ["SEED_REGULATION_TYPES"] = "false"

# ── 2. Now import the app ──
from app.database import get_session, set_sqlite_pragma  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models import Base, Project, UploadVersion  # noqa: E402
from app.services.notifier import get_notifier  # noqa: E402
from app.services.regulation_types import list_regulation_types, seed_regulation_types  # noqa: E402


class RecordingNotifier:
    """Stands in for the upload-service notifier; keeps every event it is handed."""

    def __init__(self):
        self.events = []

    @property
    def is_enabled(self) -> bool:
        return True

    async def notify(self, event) -> bool:
        self.events.append(event)
        return True

    def notify_later(self, event) -> None:
        self.events.append(event)

    async def drain(self) -> None:
        pass


# ── Fixtures ──

@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(eng.sync_engine, "connect", set_sqlite_pragma)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def sessions(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def client(sessions, notifier) -> AsyncGenerator[AsyncClient, None]:
    async def _test_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with sessions() as session:
            yield session

    fastapi_app.dependency_overrides[get_session] = _test_get_session
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


# ── Seed data helpers ──

@pytest_asyncio.fixture
async def seed_types(sessions) -> dict[str, int]:
    """Regulation type ids by name (Boolean, Threshold, JUnit)."""
    async with sessions() as s:
        await seed_regulation_types(s)
        return {rt.name: rt.id for rt in await list_regulation_types(s)}


@pytest_asyncio.fixture
async def seed_project(sessions) -> dict:
    """One project with two uploaded versions, plus an unrelated second project."""
    async with sessions() as s:
        project = Project(name="Shop Backend")
        other = Project(name="Mobile App")
        s.add_all([project, other])
        await s.flush()
        s.add_all([
            UploadVersion(catalog_id="cat-100", project_id=project.id, version="1.0.0"),
            UploadVersion(catalog_id="cat-101", project_id=project.id, version="1.1.0"),
            UploadVersion(catalog_id="cat-900", project_id=other.id, version="0.1.0"),
        ])
        await s.commit()
        return {"id": project.id, "other_id": other.id, "versions": ["cat-100", "cat-101"]}
