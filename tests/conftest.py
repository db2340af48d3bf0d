"""Shared pytest fixtures for Swipematch tests."""
import os

# Must be set before anything imports app.config / app.database.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["AUTO_CREATE_SCHEMA"] = "false"

from datetime import date, datetime, timezone

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import create_schema
from app.models.match import Swipe
from app.models.user import User
from app.services.auth_service import hash_password

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
def now():
    """Reference clock used by the age examples (1 April 2024)."""
    return datetime(2024, 4, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_password():
    return TEST_PASSWORD


@pytest.fixture(scope="session")
def password_hash():
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def make_user(db_session, password_hash):
    """Insert a user directly and return it."""
    counter = {"n": 0}

    async def _make_user(
        name: str,
        gender: str = "female",
        dob: date = date(1990, 1, 1),
        lat: float | None = None,
        lng: float | None = None,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=f"{name.lower()}.{counter['n']}@example.com",
            password_hash=password_hash,
            name=name,
            gender=gender,
            dob=dob,
            lat=lat,
            lng=lng,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_swipe(db_session):
    async def _make_swipe(swiper_id: int, target_id: int, liked: bool = True) -> Swipe:
        swipe = Swipe(swiper_id=swiper_id, target_id=target_id, liked=liked)
        db_session.add(swipe)
        await db_session.commit()
        return swipe

    return _make_swipe


@pytest.fixture
def sample_population(make_user):
    """The six-profile population from the discovery examples."""

    async def _build() -> list[User]:
        return [
            await make_user("Alice", "female", date(1990, 1, 1)),
            await make_user("Bob", "male", date(1985, 1, 1)),
            await make_user("Charlie", "male", date(1995, 1, 1)),
            await make_user("Darren", "male", date(2000, 5, 4)),
            await make_user("Erica", "other", date(2000, 5, 4)),
            await make_user("Fran", "female", date(1980, 1, 1)),
        ]

    return _build


@pytest_asyncio.fixture
async def client(session_factory, now):
    """HTTP client bound to the app, with storage and clock overridden."""
    from app.api.deps import get_discovery_service
    from app.database import get_db
    from app.main import app
    from app.services.discovery_service import DiscoveryService

    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_discovery_service] = lambda: DiscoveryService(now_provider=lambda: now)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
