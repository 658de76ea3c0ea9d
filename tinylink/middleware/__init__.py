"""HTTP middleware for the TinyLink service."""

from tinylink.middleware.logging import LoggingMiddleware
from tinylink.middleware.security import SecurityHeadersMiddleware

__all__ = ["LoggingMiddleware", "SecurityHeadersMiddleware"]
