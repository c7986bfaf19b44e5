# Database models
from app.models.user import User
from app.models.location import Location
from app.models.privacy_settings import PrivacySettings, Visibility

__all__ = [
    "User",
    "Location",
    "PrivacySettings",
    "Visibility",
]
