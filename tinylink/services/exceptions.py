"""Exceptions for the TinyLink service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
Messages are safe to show to API clients.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    pass


class LinkError(ServiceError):
    """Base exception for link-related errors."""
    pass


class LinkValidationError(LinkError):
    """Input failed validation; nothing was read from or written to storage."""
    pass


class InvalidURLError(LinkValidationError):
    """The target URL is missing, malformed or not http(s)."""
    pass


class InvalidCodeError(LinkValidationError):
    """The code does not match the allowed shape."""
    pass


class LinkNotFoundError(LinkError):
    """No link exists for the given code."""
    pass


class CodeAlreadyExistsError(LinkError):
    """The code is already in use."""
    pass


class LinkServiceError(LinkError):
    """Storage or unexpected failure while handling a link."""
    pass


class RedirectError(ServiceError):
    """Storage failure while resolving a code; the click was not counted."""
    pass
