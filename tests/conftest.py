"""
Test Configuration and Fixtures
Provides shared test setup for all test cases

Every test gets its own SQLite file database. Services open their own
sessions (the dashboard opens many concurrently), so AsyncSessionLocal is
replaced in each service module by a session factory bound to that database.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import importlib
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.database.connection import Base
from app.models import User, Property
from app.models.enums import UserRole, PropertyType, ListingType, PropertyStatus
from app.utils.security import get_password_hash

DEFAULT_PASSWORD = "Password123!"

SERVICE_MODULES = [
    "app.services.auth_service",
    "app.services.property_service",
    "app.services.favorite_service",
    "app.services.rating_service",
    "app.services.complaint_service",
    "app.services.verification_service",
    "app.services.admin_service",
    "app.services.landing_service",
    "app.services.admin_dashboard_service",
]


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed SQLite engine with foreign keys enforced (cascades rely on them)"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'estately_test.db'}",
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Session for seeding and inspecting the test database"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, monkeypatch):
    """Create test HTTP client"""
    for module_name in SERVICE_MODULES:
        module = importlib.import_module(module_name)
        monkeypatch.setattr(module, "AsyncSessionLocal", session_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db_session):
    """Factory: insert a user directly into the database"""
    async def _make_user(
        role: UserRole = UserRole.CLIENT,
        email: str = None,
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Test",
        last_name: str = "User",
        **fields,
    ) -> User:
        user = User(
            id=str(uuid.uuid4()),
            email=(email or f"{role.value.lower()}_{uuid.uuid4().hex[:8]}@estately.io").lower(),
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_property(db_session):
    """Factory: insert a listing directly into the database"""
    async def _make_property(poster: User, **fields) -> Property:
        values = {
            "title": "Two bedroom flat",
            "description": "Bright flat close to the market",
            "type": PropertyType.APARTMENT,
            "listing_type": ListingType.FOR_RENT,
            "status": PropertyStatus.AVAILABLE,
            "price": Decimal("1500000.00"),
            "address": "12 Admiralty Way",
            "city": "Lagos",
            "state": "Lagos",
            "bedrooms": 2,
            "bathrooms": 2,
            "image_urls": ["https://img.example.org/flat.jpg"],
            "amenities": ["Parking"],
        }
        values.update(fields)
        prop = Property(id=str(uuid.uuid4()), posted_by_id=poster.id, **values)
        db_session.add(prop)
        await db_session.commit()
        return prop

    return _make_property


@pytest.fixture
def login_as(client):
    """Factory: log a user in through the API and return auth headers"""
    async def _login_as(user: User, password: str = DEFAULT_PASSWORD) -> dict:
        resp = await client.post("/api/users/login", json={"email": user.email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['data']['token']}"}

    return _login_as


async def _authenticate(client, login_as, user):
    headers = await login_as(user)
    client.headers.update(headers)
    return client, user


@pytest_asyncio.fixture(scope="function")
async def authenticated_client_user(client, make_user, login_as):
    """Create and authenticate a CLIENT user for testing"""
    user = await make_user(UserRole.CLIENT, first_name="Chidi", last_name="Okafor")
    return await _authenticate(client, login_as, user)


@pytest_asyncio.fixture(scope="function")
async def authenticated_landlord(client, make_user, login_as):
    """Create and authenticate a LANDLORD for testing"""
    user = await make_user(UserRole.LANDLORD, first_name="Amaka", last_name="Eze")
    return await _authenticate(client, login_as, user)


@pytest_asyncio.fixture(scope="function")
async def authenticated_admin(client, make_user, login_as):
    """Create and authenticate an ADMIN for testing"""
    user = await make_user(UserRole.ADMIN, first_name="Site", last_name="Admin")
    return await _authenticate(client, login_as, user)


def _days_ago(days: int, hour: int = 12) -> datetime:
    """Noon UTC `days` days ago; keeps seeded rows on a predictable calendar date"""
    return (datetime.now(timezone.utc) - timedelta(days=days)).replace(hour=hour, minute=0, second=0, microsecond=0)


@pytest.fixture
def days_ago():
    return _days_ago
