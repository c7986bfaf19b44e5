"""
Pydantic schemas for user endpoints.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.schemas.location import LocationResponse
from app.schemas.privacy import PrivacySettingsResponse


# Request schemas

class UserCreate(BaseModel):
    """Schema for account creation. Missing fields are reported as 400 by the service."""
    name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = Field(None, max_length=500)


# Response schemas

class UserResponse(BaseModel):
    """Schema for a newly created user."""
    id: UUID
    name: str
    email: str
    avatar: Optional[str] = None
    created_at: datetime
    privacy_settings: Optional[PrivacySettingsResponse] = None

    class Config:
        from_attributes = True


class UserDetailResponse(UserResponse):
    """User with their current location, if any."""
    location: Optional[LocationResponse] = None
