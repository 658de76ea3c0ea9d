"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from tinylink.api.routes import health, links, pages, redirect
from tinylink.core.config import settings

# Create root router
api_router = APIRouter()

# Health checks live at the root (/healthz)
api_router.include_router(health.router)

# Include link routes with API prefix
api_router.include_router(
    links.router,
    prefix=settings.API_PREFIX
)

# Admin UI pages
api_router.include_router(pages.router)

# Include redirect routes last, at the root path (no prefix).
# /{code} matches any single path segment, so everything above must win first.
api_router.include_router(
    redirect.router
)

__all__ = ["api_router"]
