"""Admin UI pages served from the static directory."""

import os

from fastapi import APIRouter
from fastapi.responses import FileResponse

from tinylink.core.config import settings

router = APIRouter(tags=["pages"], include_in_schema=False)


def _page(name: str) -> FileResponse:
    return FileResponse(os.path.join(settings.STATIC_DIR, name), media_type="text/html")


@router.get("/")
async def index_page():
    """Dashboard: create, search and delete links."""
    return _page("index.html")


@router.get("/code/{code}")
async def stats_page(code: str):
    """Stats page for a single code; the page loads its data from the API."""
    return _page("code.html")
