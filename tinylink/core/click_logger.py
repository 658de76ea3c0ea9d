"""Redirect access logging using Loguru's built-in async features."""

import os
from datetime import datetime, timezone

from loguru import logger

from tinylink.core.config import settings

EVENT_TYPE = "link_click"

# Bound logger for click records, created by setup_click_logging()
click_logger = None
_sink_ids = []


def _is_click_record(record) -> bool:
    return record["extra"].get("event_type") == EVENT_TYPE


def setup_click_logging():
    """Configure the click access logger with async (enqueued) file sinks."""
    global click_logger

    click_logger = logger.bind(event_type=EVENT_TYPE)

    if settings.LOG_FILE_ENABLED and not _sink_ids:
        os.makedirs(settings.LOG_DIR, exist_ok=True)

        _sink_ids.append(logger.add(
            f"{settings.LOG_DIR}/link_clicks.log",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | IP:{extra[ip]} | Code:{extra[code]} | {message}",
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            enqueue=True,
            level="INFO",
            backtrace=False,
            diagnose=False,
            filter=_is_click_record,
        ))

        _sink_ids.append(logger.add(
            f"{settings.LOG_DIR}/link_clicks.json",
            serialize=True,
            enqueue=True,
            level="INFO",
            filter=_is_click_record,
        ))

    return click_logger


def shutdown_click_logging() -> None:
    """Remove the click sinks, flushing their queues."""
    while _sink_ids:
        sink_id = _sink_ids.pop()
        try:
            logger.remove(sink_id)
        except ValueError:
            # Already removed by a later setup_logging() call
            pass


def log_link_click(code: str, target_url: str, ip_address: str, user_agent: str = ""):
    """
    Record one successful redirect.

    Args:
        code: The short code that was resolved
        target_url: Where the client was sent
        ip_address: The client's IP address
        user_agent: Optional user agent string
    """
    if not settings.CLICK_LOGGING_ENABLED:
        return

    if click_logger is None:
        setup_click_logging()

    click_logger.bind(
        ip=ip_address,
        code=code,
        target_url=target_url,
        user_agent=user_agent,
        timestamp=datetime.now(timezone.utc).isoformat()
    ).info(f"Link clicked: {code}")
