"""Main application module.

This module initializes the FastAPI application, includes routes,
and configures middleware and exception handlers.
"""

import time

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from tinylink.api import api_router
from tinylink.core.alembic import run_migrations
from tinylink.core.click_logger import setup_click_logging, shutdown_click_logging
from tinylink.core.config import settings
from tinylink.core.logging import setup_logging
from tinylink.db.base import create_tables, dispose_engine
from tinylink.middleware import LoggingMiddleware, SecurityHeadersMiddleware

# Setup logging
logger = setup_logging()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)

if settings.REQUEST_LOGGING_ENABLED:
    app.add_middleware(LoggingMiddleware)
else:
    logger.info("Request logging is disabled in settings")

# Include API router
app.include_router(api_router)

# Static assets for the admin UI
app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")


def is_api_request(request: Request) -> bool:
    path = request.url.path
    return path == settings.API_PREFIX or path.startswith(settings.API_PREFIX + "/")


# Add exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """API errors are JSON ``{"error": ...}``, everything else plain text."""
    headers = getattr(exc, "headers", None)
    if is_api_request(request):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=headers,
        )

    detail = "Not found" if exc.status_code == 404 else str(exc.detail)
    return PlainTextResponse(detail, status_code=exc.status_code, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are client errors (400)."""
    logger.info(f"Request validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to catch and log all unhandled exceptions."""
    error_id = f"error-{time.time()}"

    # Log detailed exception information with traceback
    logger.opt(exception=exc).error(
        f"Unhandled exception in {request.method} {request.url.path}",
        error_id=error_id,
        url=str(request.url),
        method=request.method,
        path_params=request.path_params,
        query_params=dict(request.query_params),
        client_host=request.client.host if request.client else None
    )

    if not is_api_request(request):
        return PlainTextResponse("Internal error", status_code=500)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal error",
            "error_id": error_id,
        }
    )


# Add startup and shutdown event handlers
@app.on_event("startup")
async def startup_event():
    """Run startup tasks."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT.value}")
    logger.info(f"Base URL: {settings.PUBLIC_BASE_URL}")

    if settings.CLICK_LOGGING_ENABLED:
        setup_click_logging()
        logger.info("Click access logging initialized")

    if settings.DB_RUN_MIGRATIONS:
        logger.info("Applying database migrations")
        await run_in_threadpool(run_migrations)
    elif settings.DB_CREATE_TABLES:
        await create_tables()


@app.on_event("shutdown")
async def shutdown_event():
    """Run cleanup tasks."""
    logger.info(f"Shutting down {settings.APP_NAME}")
    await dispose_engine()
    shutdown_click_logging()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tinylink.main:app", host="0.0.0.0", port=settings.PORT)
