"""
Integration Test Fixtures

Provides fixtures for integration tests that require a running PostgreSQL.
Every test gets freshly created tables in the TEST database and an HTTP
client whose get_db dependency is bound to that database, so the
configured application database is never touched.

The tests are skipped when the test database is unreachable.

Connection settings come from POSTGRES_TEST_* (falling back to POSTGRES_*).
"""

import os
from collections.abc import AsyncGenerator
from urllib.parse import quote_plus

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

pytestmark = pytest.mark.integration


# =============================================================================
# Database Configuration
# =============================================================================


def get_test_db_url() -> str:
    """
    Build the async database URL for the test database.

    Priority: POSTGRES_TEST_* > POSTGRES_* > defaults
    """
    user = os.environ.get("POSTGRES_TEST_USER", os.environ.get("POSTGRES_USER", "testuser"))
    password = os.environ.get(
        "POSTGRES_TEST_PASSWORD", os.environ.get("POSTGRES_PASSWORD", "testpass")
    )
    db = os.environ.get("POSTGRES_TEST_DB", os.environ.get("POSTGRES_DB", "testdb"))
    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")
    return f"postgresql+asyncpg://{user}:{quote_plus(password)}@{host}:{port}/{db}"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create an engine for this test's event loop with fresh tables.

    Tables are dropped and recreated so every test starts empty.
    """
    from study_tracker.db.base import Base

    engine = create_async_engine(get_test_db_url(), poolclass=NullPool)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
    except (OperationalError, DBAPIError, OSError) as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL test database unavailable: {e}")

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """A session on the test database for direct assertions."""
    async with session_maker() as session:
        yield session


# =============================================================================
# HTTP Client
# =============================================================================


@pytest_asyncio.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Async HTTP client for the app with get_db bound to the test database.

    The app lifespan is not run, so neither init_db nor the scheduler
    touch the configured database.
    """
    from study_tracker.db.base import get_db
    from study_tracker.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_headers(client: httpx.AsyncClient) -> dict[str, str]:
    """Sign up and log in a user; return its Authorization header."""
    response = await client.post(
        "/api/auth/createUser",
        json={"name": "Ada", "email": "ada@example.com", "password": "s3cret"},
    )
    assert response.status_code == 200

    response = await client.post(
        "/api/auth/loginUser",
        json={"email": "ada@example.com", "password": "s3cret"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest_asyncio.fixture
async def subject_id(client: httpx.AsyncClient, auth_headers: dict[str, str]) -> str:
    """Import one subject (2 chapters x 3 subtopics) and return its id."""
    response = await client.post(
        "/api/assignment/createAssignment",
        headers=auth_headers,
        json={
            "subjects": [
                {
                    "subjectName": "Calculus",
                    "chapters": [
                        {
                            "name": "Limits",
                            "section": "Calculus I",
                            "subtopics": [
                                {"name": "Definition"},
                                {"name": "One-sided limits"},
                                {"name": "Continuity"},
                            ],
                        },
                        {
                            "name": "Derivatives",
                            "section": "Calculus I",
                            "subtopics": [
                                {"name": "Power rule"},
                                {"name": "Chain rule"},
                                {"name": "Implicit differentiation"},
                            ],
                        },
                    ],
                }
            ]
        },
    )
    assert response.status_code == 200

    response = await client.get("/api/subjects/list", headers=auth_headers)
    return response.json()["subjects"][0]["id"]
