"""Session management for database operations.

This module provides utilities for handling SQLAlchemy async sessions
with proper lifecycle management, error handling, and transaction support.
It includes dependency injection patterns optimized for FastAPI.
"""

from typing import AsyncGenerator, Callable, Optional, TypeVar
import logging
import inspect
from functools import wraps

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from tinylink.db.base import get_session

logger = logging.getLogger(__name__)

# Generic return type for function decorators
T = TypeVar("T")


async def safe_rollback(session: AsyncSession) -> None:
    """Roll back ``session``, logging instead of raising if that fails too."""
    try:
        await session.rollback()
    except Exception:
        logger.exception("Rollback failed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    One session (and so one pooled connection) per request. The
    connection goes back to the pool when the request finishes,
    whatever the outcome.

    Yields:
        AsyncSession: A SQLAlchemy async session object.

    Example:
        ```python
        @router.get("/links")
        async def list_links(db: AsyncSession = Depends(get_db)):
            return await repository.search(db)
        ```
    """
    async with get_session() as session:
        try:
            yield session
        except SQLAlchemyError:
            logger.exception("Database error occurred")
            await safe_rollback(session)
            raise
        except Exception:
            await safe_rollback(session)
            raise


def db_transaction(db_param_name: Optional[str] = None) -> Callable:
    """Decorator to wrap functions in a database transaction.

    Automatically finds the database session parameter, commits on success or
    rolls back on error. The parameter is located by name when
    ``db_param_name`` is given, otherwise by its ``AsyncSession`` annotation.

    Args:
        db_param_name: Optional name of the database session parameter.

    Returns:
        Callable: Decorator function

    Example:
        ```python
        @db_transaction(db_param_name="db")
        async def delete_link(self, db: AsyncSession, code: str) -> None:
            ...
        ```

    Raises:
        ValueError: If no database session is passed at call time
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        # Resolve the session parameter once, at decoration time
        parameters = inspect.signature(func).parameters
        db_param_pos = None
        db_param_key = None

        for i, (param_name, param) in enumerate(parameters.items()):
            is_async_session = param.annotation is AsyncSession

            if db_param_name and param_name == db_param_name:
                db_param_pos = i
                db_param_key = param_name
                break
            elif is_async_session and db_param_name is None:
                db_param_pos = i
                db_param_key = param_name
                break

        if db_param_key is None:
            logger.warning(
                f"Unable to find database session parameter in function '{func.__name__}'"
            )

        @wraps(func)
        async def wrapper(*args, **kwargs):
            db = None

            if db_param_key is not None and db_param_key in kwargs:
                db = kwargs[db_param_key]
            elif db_param_pos is not None and len(args) > db_param_pos:
                db = args[db_param_pos]
            else:
                db = next(
                    (a for a in (*args, *kwargs.values()) if isinstance(a, AsyncSession)),
                    None,
                )

            if db is None:
                raise ValueError(
                    f"Database session not found in function arguments for '{func.__name__}'."
                )

            try:
                result = await func(*args, **kwargs)
                await db.commit()
                return result
            except SQLAlchemyError as e:
                await safe_rollback(db)
                logger.exception(f"Transaction failed in '{func.__name__}': {e}")
                raise
            except Exception as e:
                await safe_rollback(db)
                logger.debug(f"Transaction rolled back in '{func.__name__}': {e!r}")
                raise

        return wrapper
    return decorator

