import asyncio

import pytest

from app.services.location_poller import FixedLocationSource, LocationPoller
from app.services.radar_client import RadarApiClient, RadarApiError


async def test_client_reports_and_queries(api_client, make_user):
    viewer = await make_user("viewer")
    friend = await make_user("friend", 37.7750, -122.4195)
    client = RadarApiClient(client=api_client)

    stored = await client.report_location(str(viewer.id), 37.7749, -122.4194, 5.0)
    users = await client.find_nearby(str(viewer.id), 37.7749, -122.4194, radius_m=500)

    assert stored["is_active"] is True
    assert [u["id"] for u in users] == [str(friend.id)]


async def test_client_raises_on_error_status(api_client):
    client = RadarApiClient(client=api_client)

    with pytest.raises(RadarApiError) as excinfo:
        await client.report_location("00000000-0000-0000-0000-000000000000", 1.0, 2.0)

    assert excinfo.value.status_code == 404


async def test_poller_against_the_api(api_client, make_user):
    viewer = await make_user("viewer")
    friend = await make_user("friend", 37.7750, -122.4195)
    delivered = []

    poller = LocationPoller(
        RadarApiClient(client=api_client),
        FixedLocationSource(37.7749, -122.4194),
        radius_m=1000,
    )
    poller.start(str(viewer.id), None, delivered.append, interval=60)
    for _ in range(50):
        if delivered:
            break
        await asyncio.sleep(0.02)
    await poller.aclose()

    assert [u["id"] for u in delivered[0]] == [str(friend.id)]
    location = (await api_client.get("/api/users/location", params={"user_id": str(viewer.id)})).json()
    assert location["latitude"] == 37.7749
