"""Test utilities for TinyLink tests."""

import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.models.link import Link


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_code() -> str:
    """Generate a random valid short code."""
    return random_string(random.randint(6, 8))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8).lower()}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


def create_test_link_data(
    target_url: Optional[str] = None,
    code: Optional[str] = None,
    clicks: int = 0,
    created_at: Optional[datetime] = None,
    last_clicked: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Create test data dict for a Link."""
    data = {
        "target_url": target_url or random_url(),
        "code": code or random_code(),
        "clicks": clicks,
        "last_clicked": last_clicked,
    }
    if created_at is not None:
        data["created_at"] = created_at
    return data


async def create_test_link(db: AsyncSession, **kwargs) -> Link:
    """Persist a Link and detach it from the session.

    The returned object keeps its loaded attributes, and the session's
    identity map stays empty so later inserts of the same code reach
    the database constraint.
    """
    link = Link(**create_test_link_data(**kwargs))
    db.add(link)
    await db.commit()
    await db.refresh(link)
    db.expunge(link)
    return link


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a timestamp to aware UTC; SQLite hands back naive values."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


async def reload_link(db: AsyncSession, code: str) -> Optional[Link]:
    """Read a link straight from the database, bypassing the identity map."""
    return await db.get(Link, code, populate_existing=True)
