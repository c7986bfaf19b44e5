"""
Location ingest service.

Each report overwrites the user's single location row and marks the user
online. Reports are safe to retry: there is never more than one row per
user, only `last_seen` moves forward.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import NotFound, translate_storage_errors
from app.models import Location
from app.services.user_service import require_user
from app.services.validation import (
    parse_latitude,
    parse_longitude,
    parse_optional_float,
    parse_user_id,
)
from app.utils.timezone import to_naive_utc, utc_now

logger = logging.getLogger(__name__)


@translate_storage_errors
async def report_location(
    db: AsyncSession,
    user_id,
    latitude,
    longitude,
    accuracy=None,
    now: Optional[datetime] = None,
) -> Location:
    """
    Upsert the current location of a user.

    Args:
        db: Database session
        user_id: Reporting user
        latitude: Degrees, -90..90
        longitude: Degrees, -180..180
        accuracy: Optional accuracy radius in meters, stored as given
        now: Report time (defaults to current UTC time)

    Returns:
        The stored Location

    Raises:
        InvalidArgument: user_id, latitude or longitude missing or malformed
        NotFound: no such user
    """
    uid = parse_user_id(user_id)
    lat = parse_latitude(latitude)
    lon = parse_longitude(longitude)
    acc = parse_optional_float(accuracy, "accuracy")
    seen_at = to_naive_utc(now) if now is not None else utc_now()

    # A concurrent first report may insert the row between our select and
    # commit; the second pass then updates it.
    for attempt in range(2):
        result = await db.execute(select(Location).where(Location.user_id == uid))
        location = result.scalar_one_or_none()

        if location is None:
            await require_user(db, uid)
            location = Location(user_id=uid)
            db.add(location)

        location.latitude = lat
        location.longitude = lon
        location.accuracy = acc
        location.is_active = True
        location.last_seen = seen_at

        try:
            await db.commit()
        except IntegrityError:
            if attempt:
                raise
            await db.rollback()
            logger.debug("Location row for %s created concurrently, retrying as update", uid)
            continue
        break

    logger.debug("Location for %s set to %.6f, %.6f", uid, lat, lon)
    return location


@translate_storage_errors
async def get_location(db: AsyncSession, user_id) -> Location:
    """
    Stored location of a user, with the owning user loaded.

    Raises:
        InvalidArgument: user_id missing or malformed
        NotFound: the user has never reported a location
    """
    uid = parse_user_id(user_id)
    result = await db.execute(
        select(Location)
        .options(selectinload(Location.user))
        .where(Location.user_id == uid)
    )
    location = result.scalar_one_or_none()
    if location is None:
        raise NotFound("Location not found")
    return location
