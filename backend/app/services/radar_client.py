"""
HTTP client for the radar API.

Used by the location poller to report positions and fetch nearby users
from a running backend.
"""

import logging
from typing import Any, Optional

import httpx

from app.config import get_settings

logger = logging.getLogger(__name__)

LOCATION_PATH = "/api/users/location"
NEARBY_PATH = "/api/users/nearby"


class RadarApiError(Exception):
    """The API answered with a non-success status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RadarApiClient:
    """
    Thin async wrapper over the location and nearby endpoints.

    Owns its httpx.AsyncClient unless one is passed in.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=(base_url or settings.api_base_url).rstrip("/"),
            timeout=timeout or settings.api_timeout_seconds,
        )

    async def __aenter__(self) -> "RadarApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _check(response: httpx.Response, action: str) -> Any:
        if response.status_code != 200:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            raise RadarApiError(
                f"Failed to {action}: HTTP {response.status_code} {detail}",
                response.status_code,
            )
        return response.json()

    async def report_location(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        accuracy: Optional[float] = None,
    ) -> dict:
        """POST the current position. Returns the stored location."""
        response = await self._client.post(
            LOCATION_PATH,
            json={
                "user_id": str(user_id),
                "latitude": latitude,
                "longitude": longitude,
                "accuracy": accuracy,
            },
        )
        data = self._check(response, "update location")
        return data["location"]

    async def find_nearby(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        radius_m: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        """GET users around a point, closest first."""
        params: dict[str, Any] = {
            "lat": latitude,
            "lng": longitude,
            "user_id": str(user_id),
        }
        if radius_m is not None:
            params["radius"] = radius_m
        if limit is not None:
            params["limit"] = limit

        response = await self._client.get(NEARBY_PATH, params=params)
        data = self._check(response, "fetch nearby users")
        return data.get("users", [])
