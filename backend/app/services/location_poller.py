"""
Location poller - the client side of the radar.

Drives a recurring cycle for one user at a time:

    read device location -> report it -> fetch nearby users -> deliver

A failing cycle is logged and skipped; the ticker keeps running. Only one
cycle is in flight at a time: a tick that fires while the previous cycle
is still running is skipped rather than overlapped.

Instances are explicitly owned. Create one per device/session and pass it
to whatever controls the polling lifecycle.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Protocol

from app.config import get_settings
from app.utils.timezone import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceLocation:
    """A position read from the device."""
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class PollingStatus:
    is_polling: bool
    user_id: Optional[str]


LocationSource = Callable[[], Awaitable[Optional[DeviceLocation]]]
LocationCallback = Callable[[DeviceLocation], Any]
NearbyCallback = Callable[[list], Any]


class RadarBackend(Protocol):
    """What the poller needs from the API (see RadarApiClient)."""

    async def report_location(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        accuracy: Optional[float] = None,
    ) -> Any: ...

    async def find_nearby(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        radius_m: Optional[float] = None,
    ) -> list: ...


class FixedLocationSource:
    """Location source that always reports the same position."""

    def __init__(self, latitude: float, longitude: float, accuracy: Optional[float] = None):
        self.latitude = latitude
        self.longitude = longitude
        self.accuracy = accuracy

    async def __call__(self) -> DeviceLocation:
        return DeviceLocation(self.latitude, self.longitude, self.accuracy)


class LocationPoller:
    """
    Recurring report-and-query loop for a single user.

    States: idle, or polling for exactly one user. `start` for the user
    already being polled is a no-op; `start` for another user stops the
    current loop first. `stop` is always safe.
    """

    def __init__(
        self,
        backend: RadarBackend,
        location_source: LocationSource,
        interval: Optional[float] = None,
        radius_m: Optional[float] = None,
    ):
        settings = get_settings()
        self._backend = backend
        self._location_source = location_source
        self._default_interval = settings.polling_interval_seconds if interval is None else interval
        self._radius_m = settings.polling_radius_m if radius_m is None else radius_m

        self._user_id: Optional[str] = None
        self._on_location: Optional[LocationCallback] = None
        self._on_nearby: Optional[NearbyCallback] = None

        self._ticker: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()
        # Bumped on every start/stop; cycles from an older session never deliver
        self._session = 0

    @property
    def is_polling(self) -> bool:
        return self._ticker is not None

    @property
    def is_busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def status(self) -> PollingStatus:
        return PollingStatus(is_polling=self.is_polling, user_id=self._user_id)

    def start(
        self,
        user_id: str,
        on_location: Optional[LocationCallback],
        on_nearby: Optional[NearbyCallback],
        interval: Optional[float] = None,
    ) -> None:
        """
        Begin polling for `user_id`: one cycle right away, then one per interval.

        Must be called from a running event loop.

        Args:
            user_id: User whose location is reported
            on_location: Called with each reported DeviceLocation
            on_nearby: Called with each nearby list
            interval: Seconds between cycles (default from settings)
        """
        user_id = str(user_id)
        if self.is_polling and self._user_id == user_id:
            return

        if interval is None:
            interval = self._default_interval
        if interval <= 0:
            raise ValueError("interval must be positive")

        if self.is_polling:
            self.stop()

        self._session += 1
        self._user_id = user_id
        self._on_location = on_location
        self._on_nearby = on_nearby

        loop = asyncio.get_running_loop()
        self._ticker = loop.create_task(
            self._tick(self._session, interval),
            name=f"location-poller-{user_id}",
        )
        logger.info("Started location polling for user %s every %.1fs", user_id, interval)

    def stop(self) -> None:
        """Cancel the ticker and drop callbacks. A cycle already running may finish but will not deliver."""
        if self._ticker is not None:
            self._ticker.cancel()
            logger.info("Stopped location polling for user %s", self._user_id)

        self._session += 1
        self._ticker = None
        self._inflight = None
        self._user_id = None
        self._on_location = None
        self._on_nearby = None

    async def aclose(self) -> None:
        """Stop and wait for outstanding tasks to wind down."""
        ticker = self._ticker
        self.stop()
        pending = list(self._background)
        if ticker is not None:
            pending.append(ticker)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def update_location_manually(self, location: DeviceLocation) -> None:
        """Report a given location and refresh nearby users outside the schedule."""
        if not self.is_polling:
            return
        await self._publish(self._session, location)

    async def _tick(self, session: int, interval: float) -> None:
        while True:
            self._schedule_cycle(session)
            await asyncio.sleep(interval)

    def _schedule_cycle(self, session: int) -> None:
        if self.is_busy:
            logger.debug("Previous polling cycle still running, skipping tick")
            return

        task = asyncio.get_running_loop().create_task(self._cycle(session))
        self._inflight = task
        self._background.add(task)
        task.add_done_callback(self._cycle_done)

    def _cycle_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if self._inflight is task:
            self._inflight = None

    async def _cycle(self, session: int) -> None:
        try:
            location = await self._location_source()
        except Exception:
            logger.exception("Could not read device location")
            return

        if location is None:
            logger.warning("Device location unavailable, skipping polling cycle")
            return

        await self._publish(session, location)

    async def _publish(self, session: int, location: DeviceLocation) -> None:
        user_id = self._user_id
        if user_id is None or session != self._session:
            return

        try:
            await self._backend.report_location(
                user_id, location.latitude, location.longitude, location.accuracy
            )
            # Query with the coordinates just reported
            nearby = await self._backend.find_nearby(
                user_id, location.latitude, location.longitude, radius_m=self._radius_m
            )
        except Exception:
            logger.exception("Location polling cycle failed for user %s", user_id)
            return

        if session != self._session:
            logger.debug("Dropping results of a cycle from a stopped session")
            return

        await self._deliver(self._on_location, location)
        await self._deliver(self._on_nearby, nearby)

    @staticmethod
    async def _deliver(callback: Optional[Callable[[Any], Any]], payload: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(payload)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Location polling callback failed")
