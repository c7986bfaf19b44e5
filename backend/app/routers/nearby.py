"""
Nearby users API endpoint.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.nearby import NearbyUserResponse, NearbyUsersResponse
from app.services import nearby_service

router = APIRouter()


@router.get("", response_model=NearbyUsersResponse)
async def find_nearby_users(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: Optional[float] = None,  # meters
    user_id: Optional[str] = None,
    limit: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Find visible users around a point, closest first.

    Users who are offline for more than an hour, who opted out of nearby
    search, or whose visibility is PRIVATE never appear.
    """
    results = await nearby_service.find_nearby(
        db,
        user_id,
        lat,
        lng,
        radius_m=radius,
        limit=limit,
    )
    users = [NearbyUserResponse.model_validate(result) for result in results]
    return NearbyUsersResponse(users=users, total_found=len(users))
