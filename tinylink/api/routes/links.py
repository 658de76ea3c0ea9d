"""Link management endpoints (create, list, inspect, delete)."""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.api import schemas
from tinylink.api.dependencies import get_base_url, get_link_service
from tinylink.db.session import get_db
from tinylink.models.link import Link
from tinylink.services.exceptions import (
    CodeAlreadyExistsError,
    LinkNotFoundError,
    LinkServiceError,
    LinkValidationError,
)
from tinylink.services.links import LinkService

router = APIRouter(prefix="/links", tags=["links"])


def to_response(link: Link, base_url: str) -> schemas.LinkResponse:
    return schemas.LinkResponse(
        code=link.code,
        target_url=link.target_url,
        clicks=link.clicks,
        created_at=link.created_at,
        last_clicked=link.last_clicked,
        short_url=f"{base_url}/{link.code}",
    )


@router.post(
    "",
    response_model=schemas.LinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Invalid URL or code"},
        409: {"model": schemas.ErrorResponse, "description": "Code already exists"},
    }
)
async def create_link(
    link_data: Optional[schemas.LinkCreateRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    base_url: str = Depends(get_base_url)
):
    link_data = link_data or schemas.LinkCreateRequest()
    try:
        link = await link_service.create_link(
            db=db,
            target_url=link_data.target_url,
            code=link_data.code,
        )
    except LinkValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CodeAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LinkServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return to_response(link, base_url)


@router.get("", response_model=List[schemas.LinkResponse])
async def list_links(
    q: Optional[str] = Query(None, description="Search by code or target URL"),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    base_url: str = Depends(get_base_url)
):
    try:
        links = await link_service.list_links(db, q)
    except LinkServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return [to_response(link, base_url) for link in links]


@router.get(
    "/{code}",
    response_model=schemas.LinkResponse,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Invalid code format"},
        404: {"model": schemas.ErrorResponse, "description": "Link not found"},
    }
)
async def get_link(
    code: str = Path(..., description="The link's short code"),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    base_url: str = Depends(get_base_url)
):
    try:
        link = await link_service.get_link(db, code)
    except LinkValidationError:
        raise HTTPException(status_code=400, detail="invalid code format")
    except LinkNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LinkServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return to_response(link, base_url)


@router.delete(
    "/{code}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Invalid code format"},
        404: {"model": schemas.ErrorResponse, "description": "Link not found"},
    }
)
async def delete_link(
    code: str = Path(..., description="The link's short code"),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
):
    try:
        await link_service.delete_link(db=db, code=code)
    except LinkValidationError:
        raise HTTPException(status_code=400, detail="invalid code format")
    except LinkNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LinkServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
