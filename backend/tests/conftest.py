"""
Shared fixtures.

Every test gets its own SQLite database file. The engine uses NullPool so no
connection outlives the event loop that opened it (TestClient and
``asyncio.run`` each run their own loop).
"""

import asyncio
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ideahub.database import Base, get_db
from ideahub.main import app
from ideahub.models.user import User

PASSWORD = "Secret123"


@pytest.fixture
def session_factory(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ideahub.db'}", poolclass=NullPool
    )

    # SQLite leaves foreign keys unchecked unless asked, per connection
    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_tables())
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    asyncio.run(engine.dispose())


@pytest.fixture
def run_db(session_factory):
    """Run ``fn(session)`` to completion in a fresh session and return its result."""

    def run(fn):
        async def go():
            async with session_factory() as session:
                return await fn(session)

        return asyncio.run(go())

    return run


@pytest.fixture
def make_user(run_db):
    """Insert a user row directly; returns its id."""

    def make(email: str | None = None) -> uuid.UUID:
        async def insert(session):
            user = User(
                email=email or f"{uuid.uuid4().hex[:8]}@example.com",
                password_hash="not-used",
                name="Test User",
            )
            session.add(user)
            await session.commit()
            return user.id

        return run_db(insert)

    return make


@pytest.fixture
def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register and log in a user; returns bearer headers for that user."""

    def do_register(email: str | None = None) -> dict:
        email = email or f"{uuid.uuid4().hex[:8]}@example.com"
        response = client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": PASSWORD, "name": "Test User"},
        )
        assert response.status_code == 201, response.text
        response = client.post(
            "/api/v1/auth/login", json={"email": email, "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        # Tests authenticate explicitly through the header
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return do_register


@pytest.fixture
def auth_headers(register):
    return register()
