"""
Data models for the TinyLink service.

This module imports and exports all SQLModel models used in the application.
"""

# First import SQLModel itself to ensure metadata is initialized
from sqlmodel import SQLModel

from tinylink.models.link import (
    CODE_MAX_LENGTH,
    CODE_MIN_LENGTH,
    Link,
    LinkBase,
    LinkCreate,
    utcnow,
)

__all__ = [
    "SQLModel",
    "CODE_MAX_LENGTH",
    "CODE_MIN_LENGTH",
    "Link",
    "LinkBase",
    "LinkCreate",
    "utcnow",
]
