"""Async engine and session plumbing for endpoints that run list queries.

Nothing is created at import time: the engine and session factory are built
on first use from ``get_settings()`` and cached.
"""

from functools import lru_cache
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from listquery.config import Settings, get_settings


def build_engine(config: Optional[Settings] = None, **engine_kwargs) -> AsyncEngine:
    """Create an async engine for ``config.DATABASE_URL``.

    SQL is echoed when LOG_LEVEL is "debug". Extra keyword arguments are
    passed to ``create_async_engine`` (e.g. ``poolclass``).
    """
    config = config or get_settings()
    options = {"echo": config.LOG_LEVEL.lower() == "debug", "pool_pre_ping": True}
    options.update(engine_kwargs)
    return create_async_engine(config.DATABASE_URL, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    # Passing the factory (not a session) to run_list_query runs rows + count concurrently.
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


@lru_cache()
def get_engine() -> AsyncEngine:
    return build_engine(get_settings())


@lru_cache()
def get_session_factory() -> async_sessionmaker:
    return build_session_factory(get_engine())


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_session_factory()() as session:
        yield session
