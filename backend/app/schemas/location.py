"""
Pydantic schemas for location endpoints.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class LocationUpdate(BaseModel):
    """
    Location report from a device.

    Fields are optional here so that missing values surface as the
    service's 400 rather than a schema error.
    """
    user_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None  # meters


class LocationResponse(BaseModel):
    """Stored location snapshot."""
    id: UUID
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    is_active: bool
    last_seen: datetime

    class Config:
        from_attributes = True


class LocationUpdateResponse(BaseModel):
    success: bool
    location: LocationResponse


class LocationOwner(BaseModel):
    id: UUID
    name: str
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class LocationDetailResponse(LocationResponse):
    """Location with a minimal projection of its owner."""
    user_id: UUID
    user: LocationOwner
