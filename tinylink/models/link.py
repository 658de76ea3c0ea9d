"""Link data models.

This module defines the Link model, the single table behind the service.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Text, text
from sqlmodel import Field, SQLModel

CODE_MIN_LENGTH = 6
CODE_MAX_LENGTH = 8


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class LinkBase(SQLModel):
    """Fields supplied when a link is created."""

    code: str = Field(
        primary_key=True,
        max_length=CODE_MAX_LENGTH,
        description="Unique alphanumeric short code",
    )
    target_url: str = Field(
        sa_type=Text,
        description="Absolute http(s) URL the code redirects to",
    )


class Link(LinkBase, table=True):
    """
    A shortened link.

    ``target_url`` never changes after insert. ``clicks`` and
    ``last_clicked`` are only written by the redirect resolver.
    """

    __tablename__ = "links"

    clicks: int = Field(
        default=0,
        sa_column_kwargs={"server_default": text("0")},
        description="Number of successful redirects",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        index=True,
        sa_type=DateTime(timezone=True),
        description="Timestamp when this link was created",
    )
    last_clicked: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        description="Timestamp of the most recent redirect",
    )

    __table_args__ = (
        CheckConstraint("clicks >= 0", name="ck_links_clicks_non_negative"),
    )


class LinkCreate(LinkBase):
    """Schema for inserting a new link."""
    pass
