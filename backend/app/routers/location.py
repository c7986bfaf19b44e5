"""
Location API endpoints.

Devices report their position here; every report marks the user online.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.location import (
    LocationDetailResponse,
    LocationResponse,
    LocationUpdate,
    LocationUpdateResponse,
)
from app.services import location_service

router = APIRouter()


@router.post("", response_model=LocationUpdateResponse)
async def update_location(
    data: LocationUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Upsert the caller's current location.

    Safe to retry: there is only ever one stored location per user.
    """
    location = await location_service.report_location(
        db,
        data.user_id,
        data.latitude,
        data.longitude,
        data.accuracy,
    )
    return LocationUpdateResponse(
        success=True,
        location=LocationResponse.model_validate(location),
    )


@router.get("", response_model=LocationDetailResponse)
async def get_location(
    user_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Get a user's stored location with a minimal user projection."""
    location = await location_service.get_location(db, user_id)
    return LocationDetailResponse.model_validate(location)
