"""
Request logging middleware for FastAPI using Loguru.

Every response gets an ``X-Request-ID`` header and one log record at the
custom ``REQUEST`` level with method, path, status and latency.
"""

import time
import uuid

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


def client_ip(request: Request) -> str:
    """Client address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one record per request and stamp a request ID on the response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # Reuse an incoming request ID so logs can be joined across services
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        start_time = time.perf_counter()
        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

        log_record = {
            "request_id": request_id,
            "client_ip": client_ip(request),
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": process_time_ms,
        }
        if request.query_params:
            log_record["query_params"] = dict(request.query_params)

        logger.log(
            "REQUEST",
            "{method} {path} {status_code} {process_time_ms}ms",
            **log_record,
        )
        return response
