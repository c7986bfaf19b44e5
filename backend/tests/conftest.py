import os
from datetime import datetime
from typing import Optional

# Point the app at SQLite before app.config / app.database are imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "false")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Location, PrivacySettings, User
from app.utils.timezone import utc_now


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def api_client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def make_user(session_maker):
    """
    Insert a user directly, optionally with a location and privacy settings.

    `privacy` overrides default settings fields; `with_privacy=False` skips
    the settings row entirely.
    """
    counter = {"n": 0}

    async def _make_user(
        name: str = "user",
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        last_seen: Optional[datetime] = None,
        is_active: bool = True,
        privacy: Optional[dict] = None,
        with_privacy: bool = True,
    ) -> User:
        counter["n"] += 1
        async with session_maker() as session:
            user = User(name=name, email=f"{name}-{counter['n']}@example.com")
            session.add(user)
            await session.flush()

            if latitude is not None and longitude is not None:
                session.add(Location(
                    user_id=user.id,
                    latitude=latitude,
                    longitude=longitude,
                    accuracy=5.0,
                    is_active=is_active,
                    last_seen=last_seen or utc_now(),
                ))
            if with_privacy:
                settings = PrivacySettings.with_defaults(user.id)
                for key, value in (privacy or {}).items():
                    setattr(settings, key, value)
                session.add(settings)

            await session.commit()
            return user

    return _make_user


@pytest_asyncio.fixture
async def file_session_maker(tmp_path):
    """Sessions on a file-backed database, each with its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'radar.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()
