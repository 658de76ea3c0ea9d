"""Short link redirection endpoint with click counting."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from tinylink.api.dependencies import get_redirect_resolver
from tinylink.core.click_logger import log_link_click
from tinylink.db.session import get_db
from tinylink.middleware.logging import client_ip
from tinylink.services.exceptions import RedirectError
from tinylink.services.resolver import RedirectResolver
from tinylink.services.validation import is_valid_code

# Create router with tags
router = APIRouter(tags=["redirect"])


@router.get(
    "/{code}",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
    responses={404: {"description": "Unknown or malformed code"}},
)
async def redirect_to_target(
    request: Request,
    code: str,
    db: AsyncSession = Depends(get_db),
    resolver: RedirectResolver = Depends(get_redirect_resolver),
):
    """Redirect to the link's target URL and count the click."""
    # Anything that can't be a code is an ordinary 404, storage is not touched
    if not is_valid_code(code):
        raise HTTPException(status_code=404, detail="Not found")

    try:
        result = await resolver.resolve(db, code)
    except RedirectError:
        logger.error("Redirect failed", code=code, path=request.url.path)
        raise HTTPException(status_code=500, detail="Internal error")

    if not result.found:
        raise HTTPException(status_code=404, detail="Not found")

    log_link_click(
        code=code,
        target_url=result.target_url,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )
    return RedirectResponse(url=result.target_url, status_code=status.HTTP_302_FOUND)
