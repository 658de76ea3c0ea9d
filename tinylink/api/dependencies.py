"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access repositories and service instances.
"""

from fastapi import Depends

from tinylink.core.config import settings
from tinylink.repositories.link_repository import LinkRepository
from tinylink.services.links import LinkService
from tinylink.services.resolver import RedirectResolver


async def get_link_repository() -> LinkRepository:
    """Get an instance of the link repository."""
    return LinkRepository()


async def get_link_service(
    link_repo: LinkRepository = Depends(get_link_repository),
) -> LinkService:
    """Get an instance of the link service."""
    return LinkService(link_repository=link_repo)


async def get_redirect_resolver(
    link_repo: LinkRepository = Depends(get_link_repository),
) -> RedirectResolver:
    """Get an instance of the redirect resolver."""
    return RedirectResolver(link_repository=link_repo)


def get_base_url() -> str:
    """Get the base URL for short links."""
    return settings.PUBLIC_BASE_URL
