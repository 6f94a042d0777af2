"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bugbridge.correlation import CorrelationStore, init_correlation_storage

if typ.TYPE_CHECKING:
    from pathlib import Path


async def _setup_sqlite(tmp_path: Path) -> AsyncEngine:
    """Create a SQLite engine with the correlation table."""
    # One pooled connection: concurrent SQLite writers otherwise fail with
    # "database is locked" instead of a constraint violation.
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bugbridge_test.db'}",
        pool_size=1,
        max_overflow=0,
    )
    try:
        await init_correlation_storage(engine)
    except Exception:
        await engine.dispose()
        raise
    return engine


@pytest_asyncio.fixture
async def session_factory(
    tmp_path: Path,
) -> typ.AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield a fresh async session factory backed by sqlite."""
    engine = await _setup_sqlite(tmp_path)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def store(
    session_factory: async_sessionmaker[AsyncSession],
) -> CorrelationStore:
    """Return a correlation store over the test database."""
    return CorrelationStore(session_factory)
