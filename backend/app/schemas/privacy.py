"""
Pydantic schemas for privacy settings endpoints.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from app.models import Visibility


class PrivacySettingsUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged. Visibility is case-insensitive."""
    user_id: Optional[str] = None
    visibility: Optional[str] = None
    show_distance: Optional[bool] = None
    show_last_seen: Optional[bool] = None
    allow_nearby_search: Optional[bool] = None


class PrivacySettingsResponse(BaseModel):
    user_id: UUID
    visibility: Visibility
    show_distance: bool
    show_last_seen: bool
    allow_nearby_search: bool
    updated_at: datetime

    class Config:
        from_attributes = True
