"""
Pydantic schemas for the nearby endpoint.

`distance` and `last_seen` are null when the user does not disclose them.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class NearbyLocationResponse(BaseModel):
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True


class NearbyPrivacyResponse(BaseModel):
    visibility: str
    show_distance: bool
    show_last_seen: bool

    class Config:
        from_attributes = True


class NearbyUserResponse(BaseModel):
    id: UUID
    name: str
    avatar: Optional[str] = None
    distance: Optional[int] = None  # meters
    location: NearbyLocationResponse
    is_online: bool
    last_seen: Optional[datetime] = None
    privacy: NearbyPrivacyResponse

    class Config:
        from_attributes = True


class NearbyUsersResponse(BaseModel):
    users: list[NearbyUserResponse]
    total_found: int
