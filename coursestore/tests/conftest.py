"""
Centralized Test Configuration.
"""

from datetime import date

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from coursestore.app.main import app
from coursestore.app.db.session import get_db, Base
from coursestore.app.core.security import get_password_hash
from coursestore.app.core.jwt import create_user_token
import coursestore.app.core.redis_client as redis_client_module

from coursestore.app.models.user import User, UserRole
from coursestore.app.models.category import Category
from coursestore.app.models.course import Course
from coursestore.app.models.schedule import Schedule, ScheduleCourse
from coursestore.app.models.payment_method import PaymentMethod

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


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

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture
async def session_factory():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(autouse=True)
def apply_overrides(session_factory, mock_redis):
    """Point the app at the test database and the mock Redis."""
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = mock_redis

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


async def create_user(db, username, role=UserRole.STUDENT, password="password123", is_active=True):
    user = User(
        email=f"{username}@test.com",
        username=username,
        hashed_password=get_password_hash(password),
        role=role,
        is_active=is_active
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def auth_headers(user) -> dict:
    token = create_user_token(user.id, user.username, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def student(db_session):
    return await create_user(db_session, "student")


@pytest.fixture
async def other_student(db_session):
    return await create_user(db_session, "otherstudent")


@pytest.fixture
async def admin(db_session):
    return await create_user(db_session, "admin", role=UserRole.ADMIN)


@pytest.fixture
async def catalog(db_session):
    """
    Two courses on one schedule date.

    Returns a dict of plain ids and prices so tests never touch expired
    ORM instances after a rollback.
    """
    category = Category(category_name="English", category_description="English courses")
    schedule = Schedule(schedule_date=date(2030, 1, 15))
    db_session.add_all([category, schedule])
    await db_session.flush()

    course_a = Course(category_id=category.id, course_name="Basic English", course_price=50000)
    course_b = Course(category_id=category.id, course_name="TOEFL Preparation", course_price=75000)
    db_session.add_all([course_a, course_b])
    await db_session.flush()

    offering_a = ScheduleCourse(course_id=course_a.id, schedule_id=schedule.id)
    offering_b = ScheduleCourse(course_id=course_b.id, schedule_id=schedule.id)
    db_session.add_all([offering_a, offering_b])
    await db_session.commit()

    return {
        "category_id": category.id,
        "schedule_date": schedule.schedule_date,
        "course_a": course_a.id,
        "course_b": course_b.id,
        "offering_a": offering_a.id,
        "offering_b": offering_b.id,
        "price_a": 50000,
        "price_b": 75000,
    }


@pytest.fixture
async def payment_methods(db_session):
    active = PaymentMethod(payment_method_name="Bank Transfer")
    inactive = PaymentMethod(payment_method_name="Cash", is_active=False)
    db_session.add_all([active, inactive])
    await db_session.commit()
    return {"active": active.id, "inactive": inactive.id}


@pytest.fixture
def make_user(db_session):
    async def _make(username, **kwargs):
        return await create_user(db_session, username, **kwargs)
    return _make


@pytest.fixture
def headers_for():
    return auth_headers
