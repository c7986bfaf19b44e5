"""
Error taxonomy shared by services and routers.

Services raise these; `app.main` maps them onto HTTP responses.
"""

import functools
import logging

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class RadarError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidArgument(RadarError):
    """Missing or malformed input. Never retried automatically."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(RadarError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class StorageError(RadarError):
    """Persistence layer unavailable or inconsistent. Safe to retry with backoff."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def translate_storage_errors(func):
    """
    Wrap an async service function taking `db` as first argument.

    SQLAlchemy failures roll back the session and are re-raised as StorageError.
    """

    @functools.wraps(func)
    async def wrapper(db, *args, **kwargs):
        try:
            return await func(db, *args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("Storage failure in %s: %s", func.__name__, exc)
            await db.rollback()
            raise StorageError(f"Storage unavailable during {func.__name__}") from exc

    return wrapper
