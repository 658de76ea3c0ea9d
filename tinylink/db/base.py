"""Database base configuration for SQLAlchemy with SQLModel.

This module provides base database configuration for async SQLAlchemy with SQLModel.
It includes:
- Engine configuration
- Session factory
- Table creation for development and tests
- Health check functionality
"""

from typing import Any, AsyncGenerator, Dict
import asyncio
import logging
import ssl
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from sqlalchemy.sql import text
from sqlmodel import SQLModel

from tinylink.core.config import settings

logger = logging.getLogger(__name__)

_POOLED = {
    "pool_size": settings.POSTGRES_POOL_SIZE,
    "max_overflow": settings.POSTGRES_POOL_MAX_OVERFLOW,
    "pool_timeout": settings.POSTGRES_POOL_TIMEOUT,
    "pool_recycle": settings.POSTGRES_POOL_RECYCLE,
    "pool_pre_ping": True,
}

# Mapping of environment to SQLAlchemy engine configurations
ENGINE_CONFIGS: Dict[str, Dict[str, Any]] = {
    "development": dict(_POOLED),
    "staging": dict(_POOLED),
    "production": dict(_POOLED),
    "testing": {
        "poolclass": NullPool,  # Use NullPool for tests to avoid connection issues
    },
}


def get_engine_config() -> Dict[str, Any]:
    """Get the appropriate engine configuration based on the environment.

    Returns:
        Dict: Engine configuration parameters for the current environment.
    """
    env = settings.ENVIRONMENT.value
    config = dict(ENGINE_CONFIGS.get(env, ENGINE_CONFIGS["development"]))
    config["echo"] = settings.DB_ECHO

    if settings.DB_SSL:
        # Managed Postgres hosts often present certificates we cannot verify
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        config["connect_args"] = {"ssl": ssl_context}

    return config


def get_engine() -> AsyncEngine:
    """Create and configure an async SQLAlchemy engine.

    Returns:
        AsyncEngine: Configured SQLAlchemy async engine instance.
    """
    engine_url = str(settings.SQLALCHEMY_DATABASE_URI)
    engine_config = get_engine_config()

    # Never log credentials
    logger.info(f"Creating database engine for {engine_url.rsplit('@', 1)[-1]}")

    return create_async_engine(engine_url, **engine_config)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with the settings every session in the app uses."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Shared async engine instance (owns the connection pool)
engine = get_engine()

# Async session factory
async_session_factory = make_session_factory(engine)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async session with proper cleanup.

    Closing the session hands its connection back to the pool on
    every exit path.

    Yields:
        AsyncSession: SQLAlchemy async session
    """
    session = async_session_factory()
    try:
        yield session
    finally:
        await session.close()


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create all tables known to SQLModel metadata if they don't exist."""
    # Register the table models
    import tinylink.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ensured")


async def dispose_engine(bind: AsyncEngine = engine) -> None:
    """Close every pooled connection."""
    await bind.dispose()


class DatabaseHealthCheck:
    """Health check functionality for the database connection."""

    @staticmethod
    async def check_connection(session: AsyncSession) -> Dict[str, Any]:
        """Check database connectivity and return status.

        Args:
            session: Session to run the probe query on

        Returns:
            Dict: Health check result containing status and latency information
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        status = "healthy"
        error_message = None
        latency_ms = 0

        try:
            await session.execute(text("SELECT 1"))
            await session.rollback()
            latency_ms = int((loop.time() - start_time) * 1000)
        except Exception as e:
            status = "unhealthy"
            error_message = "database unavailable"
            logger.error(f"Database health check failed: {e}")

        return {
            "status": status,
            "latency_ms": latency_ms,
            "error": error_message,
        }
