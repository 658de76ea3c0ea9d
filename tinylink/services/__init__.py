"""Service layer for the TinyLink service.

This package contains service classes implementing the business logic of the application.
Services orchestrate interactions between repositories and provide domain-specific operations.
"""

from tinylink.services.links import LinkService
from tinylink.services.resolver import RedirectResolver, RedirectResult

__all__ = ["LinkService", "RedirectResolver", "RedirectResult"]
