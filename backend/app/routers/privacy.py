"""
Privacy settings API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.privacy import PrivacySettingsResponse, PrivacySettingsUpdate
from app.services import privacy_service

router = APIRouter()


@router.get("", response_model=PrivacySettingsResponse)
async def get_privacy_settings(
    user_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a user's privacy settings.

    Users without settings get the defaults created on the spot.
    """
    settings, _ = await privacy_service.get_or_create_privacy_settings(db, user_id)
    return PrivacySettingsResponse.model_validate(settings)


@router.put("", response_model=PrivacySettingsResponse)
async def update_privacy_settings(
    data: PrivacySettingsUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update any subset of a user's privacy settings (upsert)."""
    settings = await privacy_service.update_privacy_settings(
        db,
        data.user_id,
        visibility=data.visibility,
        show_distance=data.show_distance,
        show_last_seen=data.show_last_seen,
        allow_nearby_search=data.allow_nearby_search,
    )
    return PrivacySettingsResponse.model_validate(settings)
