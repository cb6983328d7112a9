"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own application built by create_app() on a fresh SQLite
file database, with redis disabled. A file (not :memory:) database lets
concurrent requests use separate connections the way they would in
production.
"""

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dance_events.core.config import Settings
from dance_events.core.security import create_access_token, hash_password
from dance_events.main import create_app
from dance_events.models.event import Event
from dance_events.models.user import Role, User

TEST_PASSWORD = "pw"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        REDIS_ENABLED=False,
        SECRET_KEY="test-secret-key-at-least-32-bytes-long",
        BCRYPT_ROUNDS=4,
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Application with all tables created, disposed after the test."""
    application = create_app(settings)
    await application.state.db.create_all()
    yield application
    await application.state.db.drop_all()
    await application.state.db.dispose()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def session_factory(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    return app.state.db.session_factory


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def _create_user(session: AsyncSession, email: str, role: Role, name: str) -> User:
    user = User(
        email=email,
        hashed_password=hash_password(TEST_PASSWORD, rounds=4),
        name=name,
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def _headers(user: User, settings: Settings) -> dict:
    token = create_access_token(user.id, user.role, user.email, settings)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def dancer(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "dancer@example.com", Role.DANCER, "Dee Dancer")


@pytest_asyncio.fixture
async def other_dancer(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "dancer2@example.com", Role.DANCER, "Second Dancer")


@pytest_asyncio.fixture
async def studio(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "studio@example.com", Role.STUDIO, "Salsa Studio")


@pytest_asyncio.fixture
async def agency(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "agency@example.com", Role.AGENCY, "Tango Agency")


@pytest.fixture
def dancer_headers(dancer: User, settings: Settings) -> dict:
    return _headers(dancer, settings)


@pytest.fixture
def other_dancer_headers(other_dancer: User, settings: Settings) -> dict:
    return _headers(other_dancer, settings)


@pytest.fixture
def studio_headers(studio: User, settings: Settings) -> dict:
    return _headers(studio, settings)


@pytest.fixture
def agency_headers(agency: User, settings: Settings) -> dict:
    return _headers(agency, settings)


@pytest_asyncio.fixture
async def salsa_night(db_session: AsyncSession, studio: User) -> Event:
    """A $10 event created by the studio."""
    event = Event(
        title="Salsa Night",
        description="Social dancing with a live band",
        location="NYC",
        start_at=datetime(2025, 1, 1, 20, 0, tzinfo=timezone.utc),
        price_cents=1000,
        creator_id=studio.id,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event
