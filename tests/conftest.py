"""
Pytest configuration and fixtures.

This module provides:
- A file-backed SQLite database (aiosqlite) per test, with all tables created
- Session and session-factory fixtures for the list query service
- A FastAPI app exposing list endpoints, and an httpx client for it
- Factory fixtures for creating test data
"""

from typing import AsyncGenerator

import pytest
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from listquery import (
    ListQueryParams,
    ParsedListQuery,
    item_response,
    list_response,
    run_list_query,
)
from listquery.config import Settings
from listquery.database import build_engine, build_session_factory, get_session
from tests.factories import ResourceFactory
from tests.models import Resource, resource_list_config


# =============================================================================
# Database fixtures (fresh for each test)
# =============================================================================


@pytest.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create an async engine on a throwaway SQLite file with all tables.

    A file (not :memory:) is used so that separate sessions, as used by the
    concurrent rows + count path, see the same data.
    """
    test_settings = Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'listquery_test.db'}",
        LOG_LEVEL="info",  # Set to "debug" for SQL query debugging
    )
    engine = build_engine(test_settings, poolclass=NullPool)
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to the test engine."""
    return build_session_factory(test_engine)


@pytest.fixture
async def test_session(
    session_factory: async_sessionmaker,
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a single test."""
    async with session_factory() as session:
        yield session


# =============================================================================
# API fixtures
# =============================================================================


resources_query = ListQueryParams(resource_list_config)


@pytest.fixture
def app() -> FastAPI:
    """
    FastAPI app with list endpoints built on ListQueryParams + run_list_query.

    Endpoints:
    - GET /api/v1/resources - list resources (exact count)
    - GET /api/v1/users/{owner_id}/resources - list scoped to one owner
    - GET /api/v1/resources/{id} - single resource envelope
    """
    app = FastAPI()

    @app.get("/api/v1/resources")
    async def list_resources(
        query: ParsedListQuery = Depends(resources_query),
        session: AsyncSession = Depends(get_session),
    ):
        result = await run_list_query(session, Resource, query)
        return list_response(
            [row.model_dump() for row in result.rows], result.total, query.limit, query.offset
        )

    @app.get("/api/v1/users/{owner_id}/resources")
    async def list_user_resources(
        owner_id: str,
        query: ParsedListQuery = Depends(resources_query),
        session: AsyncSession = Depends(get_session),
    ):
        result = await run_list_query(
            session, Resource, query, base_where=Resource.owner_id == owner_id
        )
        return list_response(
            [row.model_dump() for row in result.rows], result.total, query.limit, query.offset
        )

    @app.get("/api/v1/resources/{id}")
    async def get_resource(id: int, session: AsyncSession = Depends(get_session)):
        resource = await session.get(Resource, id)
        return item_response(resource.model_dump() if resource else None)

    return app


@pytest.fixture
async def client(app: FastAPI, test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide an async HTTP client for the test app.

    The database session dependency is overridden to use the test session.
    """

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_session] = override_get_session

    # Create async client with ASGITransport (required for httpx 0.27+)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Factory fixtures for creating test data
# =============================================================================


@pytest.fixture
async def resource_factory(test_session: AsyncSession):
    """
    Factory fixture for creating Resource instances in the test database.

    Usage:
        resource = await resource_factory(status="LISTED", created_at=1700000000)
    """

    async def _create_resource(**kwargs) -> Resource:
        resource = ResourceFactory.build(**kwargs)
        test_session.add(resource)
        await test_session.commit()
        await test_session.refresh(resource)
        return resource

    return _create_resource
