"""
Visibility policy for proximity queries.

Decides whether a candidate may show up in a viewer's nearby list and
which of the candidate's fields may be disclosed. Hidden users are
silently excluded; nothing here raises.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.config import get_settings
from app.models import Location, PrivacySettings, User, Visibility
from app.utils.timezone import seconds_ago


@dataclass(frozen=True)
class DisclosedFields:
    """Fields of a visible candidate that the candidate allows others to see."""
    distance: Optional[int]
    last_seen: Optional[datetime]


def freshness_cutoff(now: Optional[datetime] = None, window_seconds: Optional[int] = None) -> datetime:
    """Oldest `last_seen` still considered online."""
    if window_seconds is None:
        window_seconds = get_settings().location_freshness_seconds
    return seconds_ago(window_seconds, now)


def is_fresh(
    location: Optional[Location],
    now: Optional[datetime] = None,
    window_seconds: Optional[int] = None,
) -> bool:
    """Active and reported within the freshness window."""
    if location is None or not location.is_active:
        return False
    return location.last_seen >= freshness_cutoff(now, window_seconds)


def is_discoverable(privacy: Optional[PrivacySettings]) -> bool:
    """Privacy posture allows appearing in nearby searches at all."""
    if privacy is None:
        return False
    if not privacy.allow_nearby_search:
        return False
    # FRIENDS is treated like PUBLIC until friendships are modeled
    return privacy.visibility != Visibility.PRIVATE.value


def is_visible(
    viewer_id: Optional[uuid.UUID],
    candidate: User,
    now: Optional[datetime] = None,
    window_seconds: Optional[int] = None,
) -> bool:
    """
    Whether `candidate` may appear in `viewer_id`'s nearby results.

    Rules, in order: never the viewer; location active and fresh;
    nearby search allowed; visibility not PRIVATE.
    """
    if viewer_id is not None and candidate.id == viewer_id:
        return False
    if not is_fresh(candidate.location, now, window_seconds):
        return False
    return is_discoverable(candidate.privacy_settings)


def project_fields(
    privacy: PrivacySettings,
    distance_m: float,
    last_seen: datetime,
) -> DisclosedFields:
    """Gate distance and last-seen by the candidate's show_* flags."""
    return DisclosedFields(
        distance=round(distance_m) if privacy.show_distance else None,
        last_seen=last_seen if privacy.show_last_seen else None,
    )
