"""Link management service for the TinyLink service.

This module contains the LinkService class which implements business logic
for creating, listing, inspecting and deleting links.
"""

import logging
import secrets
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.core.config import settings
from tinylink.db.session import db_transaction
from tinylink.models.link import Link
from tinylink.repositories.base import DuplicateEntityError, RepositoryError
from tinylink.repositories.link_repository import LinkRepository
from tinylink.services.exceptions import (
    CodeAlreadyExistsError,
    LinkNotFoundError,
    LinkServiceError,
)
from tinylink.services.validation import validate_code, validate_target_url

logger = logging.getLogger(__name__)


class LinkService:
    """
    Service for link management business logic.

    Input is validated before any storage access. Storage failures are
    logged here and re-raised as LinkServiceError with an opaque message.
    """

    def __init__(self, link_repository: LinkRepository):
        """
        Initialize the link service.

        Args:
            link_repository: Repository for link data access
        """
        self.link_repository = link_repository

    @db_transaction(db_param_name="db")
    async def create_link(
        self,
        db: AsyncSession,
        target_url: Any,
        code: Optional[str] = None,
    ) -> Link:
        """
        Create a link with an explicit or generated code.

        Args:
            db: Database session
            target_url: Absolute http(s) URL to redirect to
            code: Optional explicit code; surrounding whitespace is ignored

        Returns:
            Link: The created link

        Raises:
            InvalidURLError: If target_url is missing, malformed or not http(s)
            InvalidCodeError: If the explicit code has the wrong shape
            CodeAlreadyExistsError: If the code is already in use
            LinkServiceError: If storage fails
        """
        target_url = validate_target_url(target_url)

        requested_code = str(code).strip() if code is not None else ""
        if requested_code:
            short_code = validate_code(requested_code)
        else:
            short_code = await self._generate_code(db)

        try:
            link = await self.link_repository.create_link(
                db, {"code": short_code, "target_url": target_url}
            )
        except DuplicateEntityError:
            logger.info(f"Code '{short_code}' already exists")
            raise CodeAlreadyExistsError("code already exists")
        except RepositoryError as e:
            logger.error(f"Error creating link: {e}")
            raise LinkServiceError("internal error") from e

        logger.info(f"Created link '{link.code}'")
        return link

    async def list_links(self, db: AsyncSession, q: Optional[str] = None) -> List[Link]:
        """
        List links newest first, optionally filtered by a search string.

        Args:
            db: Database session
            q: Case-insensitive substring matched against code or target URL

        Returns:
            List[Link]: Matching links
        """
        try:
            return await self.link_repository.search(db, q or None)
        except RepositoryError as e:
            logger.error(f"Error listing links: {e}")
            raise LinkServiceError("internal error") from e

    async def get_link(self, db: AsyncSession, code: str) -> Link:
        """
        Get a single link by code.

        Raises:
            InvalidCodeError: If the code has the wrong shape
            LinkNotFoundError: If no link has this code
            LinkServiceError: If storage fails
        """
        validate_code(code)

        try:
            link = await self.link_repository.get_by_code(db, code)
        except RepositoryError as e:
            logger.error(f"Error retrieving link '{code}': {e}")
            raise LinkServiceError("internal error") from e

        if link is None:
            raise LinkNotFoundError("not found")
        return link

    @db_transaction(db_param_name="db")
    async def delete_link(self, db: AsyncSession, code: str) -> None:
        """
        Delete a link by code.

        Raises:
            InvalidCodeError: If the code has the wrong shape
            LinkNotFoundError: If no link has this code
            LinkServiceError: If storage fails
        """
        validate_code(code)

        try:
            deleted = await self.link_repository.delete_by_code(db, code)
        except RepositoryError as e:
            logger.error(f"Error deleting link '{code}': {e}")
            raise LinkServiceError("internal error") from e

        if not deleted:
            raise LinkNotFoundError("not found")
        logger.info(f"Deleted link '{code}'")

    async def _generate_code(self, db: AsyncSession) -> str:
        """
        Pick a random code that is not in use yet.

        At most ``CODE_MAX_ATTEMPTS`` candidates are checked. If all of them
        collide the last one is returned anyway and the insert is left to
        the primary key constraint, which turns it into a conflict.
        """
        candidate = self._random_code()
        for attempt in range(1, settings.CODE_MAX_ATTEMPTS + 1):
            try:
                taken = await self.link_repository.code_exists(db, candidate)
            except RepositoryError as e:
                logger.error(f"Error checking code availability: {e}")
                raise LinkServiceError("internal error") from e

            if not taken:
                return candidate

            logger.debug(f"Generated code collided (attempt {attempt})")
            if attempt < settings.CODE_MAX_ATTEMPTS:
                candidate = self._random_code()

        logger.warning(
            f"No free code after {settings.CODE_MAX_ATTEMPTS} attempts, "
            "leaving it to the unique constraint"
        )
        return candidate

    def _random_code(self, length: Optional[int] = None) -> str:
        """Random alphanumeric code of ``length`` (default CODE_LENGTH)."""
        chars = settings.CODE_CHARS
        length = length or settings.CODE_LENGTH
        return "".join(secrets.choice(chars) for _ in range(length))
