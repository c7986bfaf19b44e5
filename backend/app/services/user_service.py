"""
User service - account creation and lookup.

Every user is created together with default privacy settings so that
they can take part in proximity queries straight away.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import InvalidArgument, NotFound, translate_storage_errors
from app.models import PrivacySettings, User
from app.services.validation import parse_user_id

logger = logging.getLogger(__name__)


@translate_storage_errors
async def create_user(
    db: AsyncSession,
    name: Optional[str],
    email: Optional[str],
    avatar: Optional[str] = None,
) -> User:
    """
    Create a user with default privacy settings.

    Raises:
        InvalidArgument: name or email missing, or email already registered
    """
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email:
        raise InvalidArgument("name and email are required")

    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise InvalidArgument("Email already registered")

    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        name=name,
        email=email,
        avatar=avatar,
        location=None,
        privacy_settings=PrivacySettings.with_defaults(user_id),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        await db.rollback()
        raise InvalidArgument("Email already registered")

    logger.info("Created user %s", user.id)
    return user


@translate_storage_errors
async def get_user(db: AsyncSession, user_id) -> User:
    """
    Fetch a user with location and privacy settings loaded.

    Raises:
        InvalidArgument: user_id missing or malformed
        NotFound: no such user
    """
    uid = parse_user_id(user_id)
    result = await db.execute(select(User).where(User.id == uid))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


async def require_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    """Load a user or raise NotFound. Caller handles storage errors."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user
