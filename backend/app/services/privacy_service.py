"""
Privacy settings service.

Reads are split in two: `get_privacy_settings` is a pure lookup, while
`get_or_create_privacy_settings` fills in defaults for users that have
none yet and tells the caller whether it did.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import InvalidArgument, translate_storage_errors
from app.models import PrivacySettings, Visibility
from app.services.user_service import require_user
from app.services.validation import parse_user_id

logger = logging.getLogger(__name__)


def parse_visibility(value) -> Visibility:
    """Accept enum members or case-insensitive names."""
    if isinstance(value, Visibility):
        return value
    try:
        return Visibility(str(value).upper())
    except ValueError:
        allowed = ", ".join(v.value for v in Visibility)
        raise InvalidArgument(f"visibility must be one of: {allowed}")


@translate_storage_errors
async def get_privacy_settings(db: AsyncSession, user_id) -> Optional[PrivacySettings]:
    """Existing settings for a user, or None."""
    uid = parse_user_id(user_id)
    result = await db.execute(
        select(PrivacySettings).where(PrivacySettings.user_id == uid)
    )
    return result.scalar_one_or_none()


@translate_storage_errors
async def get_or_create_privacy_settings(
    db: AsyncSession,
    user_id,
) -> tuple[PrivacySettings, bool]:
    """
    Settings for a user, creating the defaults when absent.

    Returns:
        Tuple of (settings, created)

    Raises:
        InvalidArgument: user_id missing or malformed
        NotFound: no such user
    """
    uid = parse_user_id(user_id)
    result = await db.execute(
        select(PrivacySettings).where(PrivacySettings.user_id == uid)
    )
    settings = result.scalar_one_or_none()
    if settings:
        return settings, False

    await require_user(db, uid)
    settings = PrivacySettings.with_defaults(uid)
    db.add(settings)
    try:
        await db.commit()
    except IntegrityError:
        # Created concurrently; return the row that won
        await db.rollback()
        result = await db.execute(
            select(PrivacySettings).where(PrivacySettings.user_id == uid)
        )
        return result.scalar_one(), False

    logger.info("Created default privacy settings for user %s", uid)
    return settings, True


@translate_storage_errors
async def update_privacy_settings(
    db: AsyncSession,
    user_id,
    visibility=None,
    show_distance: Optional[bool] = None,
    show_last_seen: Optional[bool] = None,
    allow_nearby_search: Optional[bool] = None,
) -> PrivacySettings:
    """
    Upsert privacy settings. Fields left as None keep their current value,
    or take the default when the row is created.

    Raises:
        InvalidArgument: user_id missing/malformed or unknown visibility
        NotFound: no such user
    """
    uid = parse_user_id(user_id)
    parsed_visibility = parse_visibility(visibility) if visibility is not None else None

    result = await db.execute(
        select(PrivacySettings).where(PrivacySettings.user_id == uid)
    )
    settings = result.scalar_one_or_none()
    if settings is None:
        await require_user(db, uid)
        settings = PrivacySettings.with_defaults(uid)
        db.add(settings)

    if parsed_visibility is not None:
        settings.visibility = parsed_visibility.value
    if show_distance is not None:
        settings.show_distance = show_distance
    if show_last_seen is not None:
        settings.show_last_seen = show_last_seen
    if allow_nearby_search is not None:
        settings.allow_nearby_search = allow_nearby_search

    await db.commit()
    return settings
