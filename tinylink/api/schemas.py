"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class LinkCreateRequest(BaseModel):
    """Request schema for creating a link.

    ``target_url`` is checked by the service so that a missing or
    malformed URL gets the same 400 response as any other bad input.
    """
    target_url: Optional[str] = None
    code: Optional[str] = None

    @field_validator("code", mode="before")
    @classmethod
    def numeric_code_to_str(cls, v: Any) -> Any:
        """Accept codes sent as JSON numbers, e.g. 1234567."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class LinkResponse(BaseModel):
    """Response schema for a single link."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    target_url: str
    clicks: int
    created_at: datetime
    last_clicked: Optional[datetime] = None
    short_url: str  # Full URL including base domain


class HealthResponse(BaseModel):
    """Response schema for the liveness check."""
    ok: bool
    version: str


class ErrorResponse(BaseModel):
    """Response schema for API errors."""
    error: str
