"""
Core logging module.

This module configures the application logging with Loguru.
"""

import logging
import os
import sys

from loguru import logger

from tinylink.core.config import settings


class InterceptHandler(logging.Handler):
    """
    Intercept standard logging and redirect to loguru.

    Library modules log through the standard library; this handler
    forwards those records so everything ends up in the same sinks.
    """

    def emit(self, record: logging.LogRecord) -> None:
        # Try to get corresponding Loguru level or use level number
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _register_request_level() -> None:
    try:
        logger.level("REQUEST")
    except ValueError:
        logger.level("REQUEST", no=25, color="<green>")


def setup_logging():
    """
    Configure application logging using Loguru.

    This sets up Loguru with proper formatting, log levels, and handlers,
    and also intercepts standard library logging.
    """
    level = settings.LOG_LEVEL.upper()

    # Remove default handlers
    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format=settings.LOG_FORMAT,
        backtrace=settings.DEBUG,
        diagnose=settings.DEBUG,
    )

    if settings.LOG_FILE_ENABLED:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        log_file_path = os.path.join(settings.LOG_DIR, settings.LOG_FILENAME)

        if settings.LOG_JSON:
            logger.add(
                log_file_path,
                level=level,
                serialize=True,
                rotation=settings.LOG_ROTATION,
                retention=settings.LOG_RETENTION,
                compression="gz",
            )
        else:
            logger.add(
                log_file_path,
                level=level,
                format=settings.LOG_FORMAT,
                rotation=settings.LOG_ROTATION,
                retention=settings.LOG_RETENTION,
                compression="gz",
            )

    # Register custom log level for request logs
    _register_request_level()

    # Intercept standard library logging
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in logging.root.manager.loggerDict.keys():
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True

    for log_name in ["uvicorn", "uvicorn.access", "uvicorn.error", "fastapi"]:
        logging_logger = logging.getLogger(log_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False

    # SQL echo is controlled by DB_ECHO, keep the engine logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DB_ECHO else logging.WARNING
    )

    return logger
