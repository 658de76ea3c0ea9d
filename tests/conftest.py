"""Test fixtures for the TinyLink service."""

import os

# Settings are read at import time, so the test environment goes first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DEBUG"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["DB_RUN_MIGRATIONS"] = "false"
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BASE_URL"] = "http://sho.rt"

from typing import AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import SQLModel

from tinylink.db.base import make_session_factory
from tinylink.db.session import get_db
from tinylink.main import app as main_app
# Import models to ensure they're registered with SQLModel metadata
from tinylink.models.link import Link  # noqa: F401
from tinylink.repositories.link_repository import LinkRepository


# Test database URL - using SQLite in-memory
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_async_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    """Session factory configured like the application's."""
    return make_session_factory(test_engine)


@pytest_asyncio.fixture
async def test_db(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session for repository and service tests."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """SQLite database on disk, so several connections can work at once."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tinylink.db'}",
        connect_args={"timeout": 30},
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def link_repository() -> LinkRepository:
    """Return a link repository instance."""
    return LinkRepository()


@pytest.fixture
def override_get_db(test_session_factory):
    """Override the get_db dependency: one new session per request."""
    async def _override_get_db():
        async with test_session_factory() as session:
            yield session

    return _override_get_db


@pytest.fixture
def test_app(override_get_db) -> Generator[FastAPI, None, None]:
    """FastAPI app with overridden dependencies."""
    app = main_app
    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client bound to the app, sharing the test's event loop."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def sync_client() -> Generator[TestClient, None, None]:
    """TestClient that runs startup and shutdown, for endpoints without storage."""
    with TestClient(main_app) as test_client:
        yield test_client
