import asyncio

import pytest

from app.services.location_poller import (
    DeviceLocation,
    FixedLocationSource,
    LocationPoller,
)

LONG_INTERVAL = 60.0  # Only the immediate cycle fires within a test


class FakeBackend:
    def __init__(self, fail_reports: int = 0, nearby=None):
        self.reports = []
        self.queries = []
        self.fail_reports = fail_reports
        self.nearby = nearby if nearby is not None else [{"id": "other", "distance": 14}]
        self.gate = None  # asyncio.Event holding reports open when set

    async def report_location(self, user_id, latitude, longitude, accuracy=None):
        self.reports.append((user_id, latitude, longitude, accuracy))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_reports > 0:
            self.fail_reports -= 1
            raise RuntimeError("server unavailable")
        return {"latitude": latitude, "longitude": longitude}

    async def find_nearby(self, user_id, latitude, longitude, radius_m=None):
        self.queries.append((user_id, latitude, longitude, radius_m))
        return list(self.nearby)


class Recorder:
    def __init__(self):
        self.locations = []
        self.nearby = []

    def on_location(self, location):
        self.locations.append(location)

    def on_nearby(self, users):
        self.nearby.append(users)


async def settle(seconds: float = 0.05):
    await asyncio.sleep(seconds)


async def test_start_runs_an_immediate_cycle():
    backend = FakeBackend()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(37.7749, -122.4194, 5.0), radius_m=1000)

    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=LONG_INTERVAL)
    await settle()

    assert backend.reports == [("u1", 37.7749, -122.4194, 5.0)]
    # Query uses the coordinates that were just reported
    assert backend.queries == [("u1", 37.7749, -122.4194, 1000)]
    assert [loc.latitude for loc in recorder.locations] == [37.7749]
    assert recorder.nearby == [[{"id": "other", "distance": 14}]]
    assert poller.status.is_polling
    assert poller.status.user_id == "u1"

    await poller.aclose()


async def test_starting_twice_for_same_user_keeps_one_timer():
    backend = FakeBackend()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))

    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=LONG_INTERVAL)
    ticker = poller._ticker
    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=LONG_INTERVAL)
    await settle()

    assert poller._ticker is ticker
    assert len(backend.reports) == 1
    assert len(recorder.nearby) == 1

    await poller.aclose()


async def test_starting_for_another_user_stops_the_first():
    backend = FakeBackend()
    first, second = Recorder(), Recorder()
    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))

    poller.start("u1", first.on_location, first.on_nearby, interval=LONG_INTERVAL)
    await settle()
    first_ticker = poller._ticker

    poller.start("u2", second.on_location, second.on_nearby, interval=LONG_INTERVAL)
    await settle()

    assert first_ticker.cancelled()
    assert [report[0] for report in backend.reports] == ["u1", "u2"]
    assert len(first.nearby) == 1
    assert len(second.nearby) == 1
    assert poller.status.user_id == "u2"

    await poller.aclose()


async def test_cycles_repeat_on_the_interval():
    backend = FakeBackend()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))

    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=0.02)
    await settle(0.15)
    await poller.aclose()

    assert len(recorder.nearby) >= 3


async def test_stop_is_idempotent_and_clears_state():
    backend = FakeBackend()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))

    poller.stop()
    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=0.02)
    await settle()
    poller.stop()
    poller.stop()
    delivered = len(recorder.nearby)
    await settle(0.1)

    assert not poller.status.is_polling
    assert poller.status.user_id is None
    assert len(recorder.nearby) == delivered


async def test_failed_cycle_skips_delivery_but_keeps_polling():
    backend = FakeBackend(fail_reports=1)
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))

    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=0.02)
    await settle(0.15)
    await poller.aclose()

    assert len(backend.reports) >= 2
    # The first cycle failed and delivered nothing; later ones did
    assert len(recorder.nearby) == len(backend.reports) - 1
    assert len(recorder.locations) == len(recorder.nearby)


async def test_unavailable_device_location_skips_cycle():
    backend = FakeBackend()
    recorder = Recorder()
    calls = []

    async def flaky_source():
        calls.append(1)
        if len(calls) == 1:
            raise OSError("no GPS fix")
        if len(calls) == 2:
            return None
        return DeviceLocation(1.0, 2.0)

    poller = LocationPoller(backend, flaky_source)
    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=0.02)
    await settle(0.15)
    await poller.aclose()

    assert len(calls) >= 3
    # The first two cycles never reached the server
    assert 1 <= len(backend.reports) <= len(calls) - 2
    assert len(recorder.nearby) == len(backend.reports)


async def test_slow_cycle_is_not_overlapped():
    backend = FakeBackend()
    backend.gate = asyncio.Event()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))

    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=0.01)
    await settle(0.1)

    assert poller.is_busy
    assert len(backend.reports) == 1

    backend.gate.set()
    await settle(0.05)
    await poller.aclose()

    assert len(recorder.nearby) >= 1


async def test_cycle_in_flight_at_stop_does_not_deliver():
    backend = FakeBackend()
    backend.gate = asyncio.Event()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))

    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=LONG_INTERVAL)
    await settle()
    poller.stop()
    backend.gate.set()
    await poller.aclose()

    assert recorder.nearby == []
    assert recorder.locations == []


async def test_async_callbacks_and_callback_errors():
    backend = FakeBackend()
    delivered = []

    async def on_location(location):
        delivered.append(location)

    def on_nearby(users):
        raise ValueError("render failed")

    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))
    poller.start("u1", on_location, on_nearby, interval=0.02)
    await settle(0.1)
    await poller.aclose()

    # A broken consumer does not stop the loop
    assert len(delivered) >= 2


async def test_update_location_manually():
    backend = FakeBackend()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(1.0, 2.0))

    await poller.update_location_manually(DeviceLocation(5.0, 6.0))
    assert backend.reports == []

    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=LONG_INTERVAL)
    await settle()
    await poller.update_location_manually(DeviceLocation(5.0, 6.0, 3.0))
    await poller.aclose()

    assert backend.reports[-1] == ("u1", 5.0, 6.0, 3.0)
    assert recorder.locations[-1].latitude == 5.0
    assert len(recorder.nearby) == 2


async def test_start_requires_positive_interval():
    poller = LocationPoller(FakeBackend(), FixedLocationSource(1.0, 2.0))
    with pytest.raises(ValueError):
        poller.start("u1", None, None, interval=-1)
    assert not poller.is_polling


async def test_zero_interval_is_rejected():
    backend = FakeBackend()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(37.7749, -122.4194))

    with pytest.raises(ValueError):
        poller.start("u1", recorder.on_location, recorder.on_nearby, interval=0)

    assert poller.is_polling is False
    assert backend.reports == []


async def test_bad_interval_leaves_current_session_running():
    backend = FakeBackend()
    recorder = Recorder()
    poller = LocationPoller(backend, FixedLocationSource(37.7749, -122.4194))
    poller.start("u1", recorder.on_location, recorder.on_nearby, interval=LONG_INTERVAL)

    with pytest.raises(ValueError):
        poller.start("u2", recorder.on_location, recorder.on_nearby, interval=0)

    assert poller.status.user_id == "u1"
    assert poller.is_polling is True
    await poller.aclose()
