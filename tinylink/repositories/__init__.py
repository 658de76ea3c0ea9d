"""
Repository layer for the TinyLink service.

Repositories encapsulate the SQL for each model and translate
SQLAlchemy errors into RepositoryError.
"""

from tinylink.repositories.base import (
    BaseRepository,
    RepositoryError,
    DuplicateEntityError,
)
from tinylink.repositories.link_repository import LinkRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "DuplicateEntityError",
    "LinkRepository",
]
