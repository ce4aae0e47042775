"""Shared test fixtures — async SQLite in-memory DB + test client."""

import os
import uuid
from collections.abc import AsyncGenerator

os.environ.setdefault("SUPER_ADMIN_KEY", "test-super-admin-key")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

# Import all models so metadata is populated
import doccredits.models  # noqa: E402, F401
from doccredits.core.database import get_session  # noqa: E402
from doccredits.main import app  # noqa: E402
from doccredits.models.document_type import DocumentTypeCreate  # noqa: E402
from doccredits.models.school import SchoolCreate  # noqa: E402
from doccredits.services import catalog, directory  # noqa: E402

ADMIN_HEADERS = {"X-Super-Admin-Key": os.environ["SUPER_ADMIN_KEY"]}


@pytest.fixture(scope="session")
async def engine():
    eng = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture(scope="session")
def test_session_factory(engine):
    """Session factory bound to the test SQLite engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
async def client(session) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session override."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return dict(ADMIN_HEADERS)


# ── Service-level factories ──────────────────────────────────

@pytest.fixture
def make_school(session):
    """Create a school directly through the directory, optionally funded."""

    async def _make(name: str = "Test School", credits: int = 0):
        school, token = await directory.create_school(
            session, SchoolCreate(name=name, contact_email="office@example.com")
        )
        if credits:
            await directory.top_up(session, school.id, credits)
            school = await directory.get_school(session, school.id)
        return school, token

    return _make


@pytest.fixture
def make_document_type(session):
    """Create an active document type with a unique code."""

    async def _make(name: str = "Admit Card", cost: int = 1, category: str = "examination"):
        return await catalog.create_document_type(
            session,
            DocumentTypeCreate(
                code=f"doc-{uuid.uuid4().hex[:12]}",
                name=name,
                category=category,
                base_credit_cost=cost,
            ),
        )

    return _make
