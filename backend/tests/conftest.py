"""
Centralized Test Configuration.
"""

import pytest
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.core.jwt import create_access_token
from backend.app.core.security import hash_password
from backend.app.core.rate_limit import limiter
from backend.app.models.enums import UserRole
from backend.app.models.user import User
from backend.app.models.company import Company
from backend.app.models.driver import Driver
from backend.app.models.vehicle import Vehicle
from backend.app.models.lead import Lead
import backend.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def setex(self, key, ttl, value):
        return await self.set(key, value, ex=ttl)

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    def flushdb(self):
        self.store = {}
        self._closed = False

    async def aclose(self):
        self._closed = True
        self.store = {}


mock_redis = MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Apply overrides once for the session."""
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = mock_redis

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    mock_redis.flushdb()
    limiter.reset()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def redis_mock():
    return mock_redis


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


# Users and tokens

async def create_user(db: AsyncSession, email: str, role: UserRole = UserRole.USER, **kwargs) -> User:
    user = User(
        email=email,
        username=kwargs.pop("username", email.split("@")[0]),
        hashed_password=hash_password(kwargs.pop("password", "password123")),
        role=role,
        is_active=kwargs.pop("is_active", True),
        **kwargs
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def token_headers(user: User) -> dict:
    token = create_access_token(
        data={"sub": user.username, "user_id": user.id, "email": user.email, "role": user.role.value}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_factory(db_session):
    async def factory(email, **kwargs):
        return await create_user(db_session, email, **kwargs)
    return factory


@pytest.fixture
async def staff_user(db_session):
    return await create_user(db_session, "staff@example.com")


@pytest.fixture
async def admin_user(db_session):
    return await create_user(db_session, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(staff_user):
    return token_headers(staff_user)


@pytest.fixture
def admin_headers(admin_user):
    return token_headers(admin_user)


# Reference data

@pytest.fixture
async def company(db_session):
    company = Company(
        name="Sahyadri Travels",
        localcharge=Decimal("50"),
        outstationcharge=Decimal("40"),
        lumpsumcharge=Decimal("30"),
    )
    db_session.add(company)
    await db_session.commit()
    await db_session.refresh(company)
    return company


@pytest.fixture
async def driver(db_session):
    driver = Driver(name="Ravi", phone="9000000001")
    db_session.add(driver)
    await db_session.commit()
    await db_session.refresh(driver)
    return driver


@pytest.fixture
async def vehicle(db_session, company, driver):
    vehicle = Vehicle(
        company_id=company.id,
        name="Innova",
        registration_number="MH12AB1234",
        assigned_driver_id=driver.id,
    )
    db_session.add(vehicle)
    await db_session.commit()
    await db_session.refresh(vehicle)
    return vehicle


@pytest.fixture
async def lead(db_session):
    lead = Lead(name="Meera", phone="9800000001")
    db_session.add(lead)
    await db_session.commit()
    await db_session.refresh(lead)
    return lead
