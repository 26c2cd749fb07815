from __future__ import annotations

import sys
from collections.abc import AsyncIterator
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from address_book.core.config import Settings  # noqa: E402
from address_book.core.db import build_engine, build_sessionmaker, create_schema  # noqa: E402
from address_book.main import create_app  # noqa: E402
from address_book.services.contacts import ContactRepository, ContactService  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
FIXED_TODAY = date(2024, 6, 15)


def build_test_settings() -> Settings:
    return Settings(app_env="test", database_url=TEST_DATABASE_URL, version="9.9.9")


@pytest.fixture()
async def session() -> AsyncIterator[AsyncSession]:
    engine = build_engine(build_test_settings())
    await create_schema(engine)
    async with build_sessionmaker(engine)() as db_session:
        yield db_session
    await engine.dispose()


@pytest.fixture()
def today() -> date:
    return FIXED_TODAY


@pytest.fixture()
def service(session: AsyncSession, today: date) -> ContactService:
    return ContactService(ContactRepository(session), today=lambda: today)


@pytest.fixture()
async def client() -> AsyncIterator[AsyncClient]:
    application = create_app(build_test_settings())
    await create_schema(application.state.engine)

    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    await application.state.engine.dispose()


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"
