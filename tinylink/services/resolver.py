"""Redirect resolution with click counting.

This is the only write path for ``clicks`` and ``last_clicked``. Each call
runs one short transaction: lock the row, bump the counter, commit. The row
lock serializes concurrent redirects of the same code, so no click is lost;
redirects of different codes never wait on each other.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from tinylink.db.session import safe_rollback
from tinylink.models.link import utcnow
from tinylink.repositories.base import RepositoryError
from tinylink.repositories.link_repository import LinkRepository
from tinylink.services.exceptions import RedirectError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedirectResult:
    """Outcome of a resolution: ``target_url`` is None when nothing matched."""

    target_url: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.target_url is not None

    @classmethod
    def not_found(cls) -> "RedirectResult":
        return cls()


class RedirectResolver:
    """Resolves codes to target URLs and counts the click."""

    def __init__(self, link_repository: LinkRepository):
        self.link_repository = link_repository

    async def resolve(self, db: AsyncSession, code: str) -> RedirectResult:
        """
        Resolve ``code`` and record one click.

        The caller is expected to have checked the code's shape already.
        A missing code is a normal outcome (``found`` is False) and leaves
        storage untouched.

        Args:
            db: Session for this request; it must not be inside a transaction
                the caller still needs, since this method commits or rolls back
            code: Code to resolve

        Returns:
            RedirectResult with the stored target URL, or a not-found result

        Raises:
            RedirectError: If storage fails; the transaction is rolled back
                and the click is not counted
        """
        try:
            link = await self.link_repository.get_by_code_for_update(db, code)
            if link is None:
                await safe_rollback(db)
                return RedirectResult.not_found()

            target_url = link.target_url
            await self.link_repository.record_click(db, code, utcnow())
            await db.commit()
        except (RepositoryError, SQLAlchemyError) as e:
            await safe_rollback(db)
            logger.error(f"Redirect of '{code}' failed: {e}")
            raise RedirectError("internal error") from e

        return RedirectResult(target_url=target_url)
