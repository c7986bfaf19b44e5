"""
User API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.users import UserCreate, UserDetailResponse, UserResponse
from app.services import user_service

router = APIRouter()


@router.post("", response_model=UserResponse)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a user.

    Default privacy settings are created alongside the user.
    """
    user = await user_service.create_user(db, data.name, data.email, data.avatar)
    return UserResponse.model_validate(user)


@router.get("", response_model=UserDetailResponse)
async def get_user(
    user_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Get a user with their location and privacy settings."""
    user = await user_service.get_user(db, user_id)
    return UserDetailResponse.model_validate(user)
