"""Core module for the TinyLink service."""

from tinylink.core.config import settings

__all__ = ["settings"]
