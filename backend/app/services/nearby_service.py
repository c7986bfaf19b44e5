"""
Proximity query service - "who is near me".

Storage does the coarse work (fresh, discoverable candidates inside the
radius' bounding box); the exact distance, visibility policy, ordering
and truncation happen here.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.errors import InvalidArgument, translate_storage_errors
from app.models import Location, PrivacySettings, User, Visibility
from app.services.geo import bounding_box, haversine_distance_m
from app.services.validation import (
    parse_latitude,
    parse_longitude,
    parse_optional_user_id,
)
from app.services.visibility import freshness_cutoff, is_visible, project_fields
from app.utils.timezone import to_naive_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NearbyLocation:
    latitude: float
    longitude: float
    accuracy: Optional[float]
    timestamp: Optional[datetime]


@dataclass(frozen=True)
class NearbyPrivacy:
    visibility: str
    show_distance: bool
    show_last_seen: bool


@dataclass(frozen=True)
class NearbyResult:
    """One entry of a nearby list. Lives for a single response."""
    id: uuid.UUID
    name: str
    avatar: Optional[str]
    distance: Optional[int]
    location: NearbyLocation
    is_online: bool
    last_seen: Optional[datetime]
    privacy: NearbyPrivacy


def _parse_radius(radius_m) -> float:
    if radius_m is None:
        return float(get_settings().nearby_default_radius_m)
    try:
        radius = float(radius_m)
    except (TypeError, ValueError):
        raise InvalidArgument("radius must be a number")
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidArgument("radius must be a positive number of meters")
    return radius


def _parse_limit(limit) -> int:
    settings = get_settings()
    if limit is None:
        return settings.nearby_default_limit
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise InvalidArgument("limit must be an integer")
    if value < 1 or value > settings.nearby_max_limit:
        raise InvalidArgument(f"limit must be between 1 and {settings.nearby_max_limit}")
    return value


async def _fetch_candidates(
    db: AsyncSession,
    viewer_id: Optional[uuid.UUID],
    lat: float,
    lon: float,
    radius_m: float,
    now: datetime,
) -> list[User]:
    """Users that pass the static visibility predicates and lie in the radius' box."""
    box = bounding_box(lat, lon, radius_m)

    query = (
        select(User)
        .join(Location, Location.user_id == User.id)
        .join(PrivacySettings, PrivacySettings.user_id == User.id)
        .where(
            Location.is_active == True,
            Location.last_seen >= freshness_cutoff(now),
            PrivacySettings.allow_nearby_search == True,
            PrivacySettings.visibility != Visibility.PRIVATE.value,
            Location.latitude >= box.min_lat,
            Location.latitude <= box.max_lat,
        )
    )
    if box.min_lon is not None:
        query = query.where(
            Location.longitude >= box.min_lon,
            Location.longitude <= box.max_lon,
        )
    if viewer_id is not None:
        query = query.where(User.id != viewer_id)

    # Refresh identities already in the session so relationships reflect the latest rows
    result = await db.execute(query.execution_options(populate_existing=True))
    return list(result.scalars().unique().all())


def _to_result(candidate: User, distance_m: float) -> NearbyResult:
    location = candidate.location
    privacy = candidate.privacy_settings
    disclosed = project_fields(privacy, distance_m, location.last_seen)

    return NearbyResult(
        id=candidate.id,
        name=candidate.name,
        avatar=candidate.avatar,
        distance=disclosed.distance,
        location=NearbyLocation(
            latitude=location.latitude,
            longitude=location.longitude,
            accuracy=location.accuracy,
            timestamp=disclosed.last_seen,
        ),
        is_online=location.is_active,
        last_seen=disclosed.last_seen,
        privacy=NearbyPrivacy(
            visibility=privacy.visibility,
            show_distance=privacy.show_distance,
            show_last_seen=privacy.show_last_seen,
        ),
    )


@translate_storage_errors
async def find_nearby(
    db: AsyncSession,
    viewer_id,
    latitude,
    longitude,
    radius_m=None,
    limit=None,
    now: Optional[datetime] = None,
) -> list[NearbyResult]:
    """
    Visible users within `radius_m` of a point, closest first.

    Args:
        db: Database session
        viewer_id: Requesting user, excluded from the results (optional)
        latitude: Query point latitude in degrees
        longitude: Query point longitude in degrees
        radius_m: Search radius in meters (default from settings, must be > 0)
        limit: Maximum number of results (default from settings)
        now: Query time used for the freshness window (default: now)

    Returns:
        Results sorted by ascending distance, ties broken by user id

    Raises:
        InvalidArgument: coordinates missing or not finite, bad radius/limit
        StorageError: the database could not be queried
    """
    lat = parse_latitude(latitude, "lat")
    lon = parse_longitude(longitude, "lng")
    radius = _parse_radius(radius_m)
    max_results = _parse_limit(limit)
    uid = parse_optional_user_id(viewer_id)
    query_time = to_naive_utc(now) if now is not None else utc_now()

    candidates = await _fetch_candidates(db, uid, lat, lon, radius, query_time)

    matches: list[tuple[float, User]] = []
    for candidate in candidates:
        if not is_visible(uid, candidate, query_time):
            continue
        distance = haversine_distance_m(
            lat, lon, candidate.location.latitude, candidate.location.longitude
        )
        if distance > radius:
            continue
        matches.append((distance, candidate))

    # Sort before truncating so the closest users always survive the cap
    matches.sort(key=lambda match: (match[0], str(match[1].id)))
    matches = matches[:max_results]

    logger.debug(
        "Nearby query at %.5f, %.5f r=%.0fm: %d candidates, %d results",
        lat, lon, radius, len(candidates), len(matches),
    )
    return [_to_result(candidate, distance) for distance, candidate in matches]
