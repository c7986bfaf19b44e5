"""
Seed the database with demo users around San Francisco.

Run with: python -m scripts.seed_data
"""

import asyncio

from sqlalchemy import select

from app.database import async_session_maker, init_db
from app.models import User, Visibility
from app.services import location_service, privacy_service, user_service


# Demo users scattered around Market Street.
# Privacy postures vary so the radar shows every visibility rule.
DEMO_USERS = [
    {
        "name": "Ada",
        "email": "ada@example.com",
        "latitude": 37.7750,
        "longitude": -122.4195,
        "privacy": {},
    },
    {
        "name": "Grace",
        "email": "grace@example.com",
        "latitude": 37.7765,
        "longitude": -122.4172,
        "privacy": {"visibility": Visibility.PUBLIC, "show_distance": False},
    },
    {
        "name": "Linus",
        "email": "linus@example.com",
        "latitude": 37.7712,
        "longitude": -122.4238,
        "privacy": {"show_last_seen": False},
    },
    {
        "name": "Margaret",
        "email": "margaret@example.com",
        "latitude": 37.7751,
        "longitude": -122.4190,
        "privacy": {"allow_nearby_search": False},
    },
    {
        "name": "Dennis",
        "email": "dennis@example.com",
        "latitude": 37.7800,
        "longitude": -122.4100,
        "privacy": {"visibility": Visibility.PRIVATE},
    },
]


async def seed_users() -> None:
    """Create demo users (idempotent by email) and report their locations."""
    async with async_session_maker() as session:
        for data in DEMO_USERS:
            result = await session.execute(
                select(User).where(User.email == data["email"])
            )
            user = result.scalar_one_or_none()

            if user:
                print(f"  ✓ {data['name']} exists")
            else:
                user = await user_service.create_user(session, data["name"], data["email"])
                print(f"  + Created: {data['name']} ({user.id})")

            if data["privacy"]:
                await privacy_service.update_privacy_settings(session, user.id, **data["privacy"])

            await location_service.report_location(
                session, user.id, data["latitude"], data["longitude"], accuracy=10
            )
            print(f"    at {data['latitude']}, {data['longitude']}")

    print("\n✓ Seed data complete!")


async def main():
    """Main entry point."""
    print("=" * 50)
    print("Seeding Radar Database")
    print("=" * 50)

    print("\nInitializing database...")
    await init_db()

    print("\nSeeding demo users...")
    await seed_users()


if __name__ == "__main__":
    asyncio.run(main())
