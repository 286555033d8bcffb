import os
from datetime import date

import pytest
import pytest_asyncio

# The application engine is built at import time; keep it off Postgres in tests
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from library_api.core.clock import FixedClock
from library_api.core.database import Base
from library_api.schemas.book import BookCreate
from library_api.services.book_service import BookService
import library_api.models  # noqa: F401  registers the tables


TODAY = date(2024, 1, 10)


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """
    For every test point the services at a throwaway sqlite file and build the tables.
    """
    db_file = tmp_path / "library_test.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_file}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )
    yield factory

    # tmp_path is cleaned by pytest
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def make_book(db):
    counter = {"n": 0}

    async def _make_book(**overrides):
        counter["n"] += 1
        data = {
            "book_code": f"BK-{counter['n']:03d}",
            "title": f"Book {counter['n']}",
            "author": "Andrea Hirata",
            "category": "Novel",
            "total_copies": 3,
        }
        data.update(overrides)
        return await BookService.create_book(db, BookCreate(**data))

    return _make_book
