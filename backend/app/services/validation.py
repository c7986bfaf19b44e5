"""Input checks shared by the services. All failures raise InvalidArgument."""

import math
import uuid
from typing import Any, Optional

from app.errors import InvalidArgument


def parse_user_id(value: Any, field: str = "user_id") -> uuid.UUID:
    """Coerce a user identifier to UUID."""
    if value is None or value == "":
        raise InvalidArgument(f"{field} is required")
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidArgument(f"{field} is not a valid identifier")


def parse_optional_user_id(value: Any, field: str = "user_id") -> Optional[uuid.UUID]:
    if value is None or value == "":
        return None
    return parse_user_id(value, field)


def parse_coordinate(value: Any, field: str, bound: float) -> float:
    """Finite number within [-bound, bound]."""
    if value is None or value == "":
        raise InvalidArgument(f"{field} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{field} must be a number")
    if not math.isfinite(number):
        raise InvalidArgument(f"{field} must be a finite number")
    if abs(number) > bound:
        raise InvalidArgument(f"{field} must be between -{bound:g} and {bound:g}")
    return number


def parse_latitude(value: Any, field: str = "latitude") -> float:
    return parse_coordinate(value, field, 90)


def parse_longitude(value: Any, field: str = "longitude") -> float:
    return parse_coordinate(value, field, 180)


def parse_optional_float(value: Any, field: str) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{field} must be a number")
    if not math.isfinite(number):
        raise InvalidArgument(f"{field} must be a finite number")
    return number
