import uuid

import pytest

from app.errors import InvalidArgument, NotFound
from app.services import location_service, user_service


async def test_create_user_with_default_privacy(db):
    user = await user_service.create_user(db, "Ada", "Ada@Example.com", "https://example.com/a.png")

    assert user.id is not None
    assert user.email == "ada@example.com"
    assert user.avatar == "https://example.com/a.png"
    assert user.privacy_settings.visibility == "FRIENDS"
    assert user.privacy_settings.allow_nearby_search is True


@pytest.mark.parametrize("name, email", [(None, "a@example.com"), ("Ada", None), ("  ", "a@example.com")])
async def test_create_user_requires_name_and_email(db, name, email):
    with pytest.raises(InvalidArgument):
        await user_service.create_user(db, name, email)


async def test_duplicate_email_is_rejected(db):
    await user_service.create_user(db, "Ada", "ada@example.com")

    with pytest.raises(InvalidArgument):
        await user_service.create_user(db, "Other Ada", "ADA@example.com")


async def test_get_user_loads_location_and_privacy(db, session_maker):
    user = await user_service.create_user(db, "Ada", "ada@example.com")
    await location_service.report_location(db, user.id, 1.5, 2.5)

    async with session_maker() as session:
        loaded = await user_service.get_user(session, str(user.id))

    assert loaded.location.latitude == 1.5
    assert loaded.privacy_settings.show_distance is True


async def test_get_user_errors(db):
    with pytest.raises(InvalidArgument):
        await user_service.get_user(db, None)
    with pytest.raises(NotFound):
        await user_service.get_user(db, uuid.uuid4())
