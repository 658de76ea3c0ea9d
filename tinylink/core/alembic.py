"""Alembic migration utilities.

Helpers for applying the schema migrations that live in the top level
``alembic`` directory. The application can run them on startup when
``DB_RUN_MIGRATIONS`` is enabled.
"""

import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine

from tinylink.core.config import settings

logger = logging.getLogger(__name__)

# Project paths
PROJECT_DIR = Path(__file__).resolve().parent.parent.parent
ALEMBIC_DIR = PROJECT_DIR / "alembic"
ALEMBIC_INI = PROJECT_DIR / "alembic.ini"


def get_alembic_config(database_url: Optional[str] = None) -> Config:
    """Build an alembic config pointing at the project's migration scripts.

    Args:
        database_url: Synchronous SQLAlchemy URL; defaults to SYNC_DATABASE_URI
    """
    alembic_cfg = Config(str(ALEMBIC_INI))
    # Logging is already routed through loguru
    alembic_cfg.attributes["configure_logger"] = False
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    # configparser treats % as interpolation
    url = database_url or str(settings.SYNC_DATABASE_URI)
    alembic_cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return alembic_cfg


def run_migrations(revision: str = "head", database_url: Optional[str] = None) -> None:
    """Upgrade the database schema to ``revision``.

    Blocking; call it from a worker thread when inside the event loop.
    """
    try:
        command.upgrade(get_alembic_config(database_url), revision)
        logger.info(f"Applied alembic migrations up to {revision}")
    except Exception as e:
        logger.error(f"Failed to run migrations: {e}")
        raise


def downgrade(target: str = "-1", database_url: Optional[str] = None) -> None:
    """Downgrade the database schema to a previous version.

    WARNING: this drops data for the affected tables.
    """
    command.downgrade(get_alembic_config(database_url), target)
    logger.info(f"Successfully downgraded to {target}")


def get_current_revision(database_url: Optional[str] = None) -> Optional[str]:
    """Return the revision the database is currently at, if any."""
    engine = create_engine(database_url or str(settings.SYNC_DATABASE_URI))
    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()
