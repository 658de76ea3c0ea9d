"""Link Repository for the TinyLink service.

This module provides the LinkRepository class for database operations on the
``links`` table. Following the Repository pattern, it keeps SQL out of the
service layer.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select, update, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from tinylink.models.link import Link, LinkCreate
from tinylink.repositories.base import BaseRepository, RepositoryError


class LinkRepository(BaseRepository[Link, LinkCreate]):
    """
    Repository for Link model database operations.

    Besides plain CRUD this provides the locking read and the counter
    update used by the redirect resolver.
    """

    unique_field = "code"

    def __init__(self):
        """Initialize the repository with the Link model type."""
        super().__init__(Link)

    async def create_link(
        self,
        db: AsyncSession,
        data: Union[LinkCreate, Dict[str, Any]]
    ) -> Link:
        """
        Insert a new link.

        There is no existence pre-check: the primary key constraint is the
        single source of truth for uniqueness.

        Raises:
            DuplicateEntityError: If the code already exists
            RepositoryError: On other database errors
        """
        return await self.create(db, data)

    async def get_by_code(self, db: AsyncSession, code: str) -> Optional[Link]:
        """
        Find a link by its code.

        Args:
            db: Database session
            code: The short code to look up

        Returns:
            The Link if found, None otherwise
        """
        return await self.get_by_id(db, code)

    async def get_by_code_for_update(self, db: AsyncSession, code: str) -> Optional[Link]:
        """
        Read a link and take an exclusive lock on its row.

        The lock is held until the surrounding transaction commits or
        rolls back. ``populate_existing`` makes sure the returned object
        reflects the row as read under the lock, not a stale identity map
        entry.

        Args:
            db: Database session with an open (or auto-begun) transaction
            code: The short code to look up

        Returns:
            The locked Link, or None if no row exists
        """
        try:
            query = (
                select(self.model_type)
                .where(self.model_type.code == code)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error locking link by code: {e}") from e

    async def record_click(self, db: AsyncSession, code: str, clicked_at: datetime) -> int:
        """
        Add one click to a link and stamp ``last_clicked``.

        The increment is computed by the database (``clicks = clicks + 1``),
        which is exact under the row lock and on backends without one.

        Args:
            db: Database session
            code: Code of the link that was clicked
            clicked_at: Timestamp to store in ``last_clicked``

        Returns:
            Number of rows updated (0 or 1)
        """
        try:
            stmt = (
                update(self.model_type)
                .where(self.model_type.code == code)
                .values(
                    clicks=self.model_type.clicks + 1,
                    last_clicked=clicked_at,
                )
            )
            result = await db.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error recording click: {e}") from e

    async def code_exists(self, db: AsyncSession, code: str) -> bool:
        """Check whether a code is already taken."""
        return await self.exists(db, code=code)

    async def search(self, db: AsyncSession, q: Optional[str] = None) -> List[Link]:
        """
        List links, newest first.

        Args:
            db: Database session
            q: Optional case-insensitive substring matched against code or
               target URL. LIKE wildcards in ``q`` are matched literally.

        Returns:
            List of Link entities ordered by ``created_at`` descending
        """
        try:
            query = select(self.model_type)
            if q:
                query = query.where(
                    or_(
                        self.model_type.code.icontains(q, autoescape=True),
                        self.model_type.target_url.icontains(q, autoescape=True),
                    )
                )
            query = query.order_by(desc(self.model_type.created_at))

            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error listing links: {e}") from e

    async def delete_by_code(self, db: AsyncSession, code: str) -> bool:
        """
        Delete a link by its code.

        Returns:
            True if a row was deleted, False if the code did not exist
        """
        return await self.bulk_delete(db, code=code) > 0
