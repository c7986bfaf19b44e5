"""PrivacySettings model - how a user may be discovered by others."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.utils.timezone import utc_now


class Visibility(str, Enum):
    """Who may discover the user at all."""
    PUBLIC = "PUBLIC"
    FRIENDS = "FRIENDS"  # No friendship graph yet: behaves like PUBLIC
    PRIVATE = "PRIVATE"


DEFAULT_VISIBILITY = Visibility.FRIENDS
DEFAULT_SHOW_DISTANCE = True
DEFAULT_SHOW_LAST_SEEN = True
DEFAULT_ALLOW_NEARBY_SEARCH = True


class PrivacySettings(Base):
    """
    Per-user privacy posture.

    Created with defaults alongside the user, or lazily on first read.
    """

    __tablename__ = "privacy_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    visibility: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_VISIBILITY.value,
        nullable=False,
    )
    show_distance: Mapped[bool] = mapped_column(
        Boolean, default=DEFAULT_SHOW_DISTANCE, nullable=False
    )
    show_last_seen: Mapped[bool] = mapped_column(
        Boolean, default=DEFAULT_SHOW_LAST_SEEN, nullable=False
    )
    allow_nearby_search: Mapped[bool] = mapped_column(
        Boolean, default=DEFAULT_ALLOW_NEARBY_SEARCH, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="privacy_settings")

    @classmethod
    def with_defaults(cls, user_id: uuid.UUID) -> "PrivacySettings":
        """Build a settings row carrying the default posture."""
        return cls(
            user_id=user_id,
            visibility=DEFAULT_VISIBILITY.value,
            show_distance=DEFAULT_SHOW_DISTANCE,
            show_last_seen=DEFAULT_SHOW_LAST_SEEN,
            allow_nearby_search=DEFAULT_ALLOW_NEARBY_SEARCH,
        )

    def __repr__(self) -> str:
        return f"<PrivacySettings {self.user_id} {self.visibility}>"
