"""Database utilities for the address book service.

The engine is owned by the application factory rather than created at import
time; routes receive sessions through :func:`get_session`.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.pool import StaticPool

from address_book.core.config import Settings
from address_book.models import Base


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine described by ``settings``."""
    url = settings.async_database_url
    options: dict[str, Any] = {}
    if _is_memory_sqlite(url):
        options["connect_args"] = {"check_same_thread": False}
        options["poolclass"] = StaticPool
    return create_async_engine(url, **options)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a SQLAlchemy async session."""
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with session_factory() as session:
        yield session
