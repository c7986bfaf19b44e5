#!/usr/bin/env python3
"""
Poll a running Radar API from a fixed position and print nearby users.

Usage:
    python -m scripts.poll_nearby USER_ID LAT LNG [--interval SECONDS] [--radius METERS]

Runs until interrupted.
"""

import argparse
import asyncio
import logging

from app.services.geo import format_distance
from app.services.location_poller import DeviceLocation, FixedLocationSource, LocationPoller
from app.services.radar_client import RadarApiClient


def print_location(location: DeviceLocation) -> None:
    print(f"\nReported {location.latitude:.5f}, {location.longitude:.5f}")


def print_nearby(users: list[dict]) -> None:
    if not users:
        print("  Nobody nearby")
        return
    for user in users:
        distance = user.get("distance")
        shown = format_distance(distance) if distance is not None else "hidden"
        print(f"  {user['name']:<20} {shown}")


async def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id")
    parser.add_argument("lat", type=float)
    parser.add_argument("lng", type=float)
    parser.add_argument("--interval", type=float, default=None, help="seconds between cycles")
    parser.add_argument("--radius", type=float, default=None, help="search radius in meters")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    async with RadarApiClient() as client:
        poller = LocationPoller(
            client,
            FixedLocationSource(args.lat, args.lng),
            radius_m=args.radius,
        )
        poller.start(args.user_id, print_location, print_nearby, interval=args.interval)
        try:
            await asyncio.Event().wait()
        finally:
            await poller.aclose()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
