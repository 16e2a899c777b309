"""Pytest configuration and fixtures for the poultry farm API tests.

Each test gets a fresh SQLite database (aiosqlite) with every table created
from the models, and the app's `get_db` dependency pointed at it.
"""

import os
from datetime import date
from typing import AsyncGenerator

os.environ.setdefault("ENVIRONMENT", "test")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from poultry_api.auth.jwt import create_access_token
from poultry_api.auth.password import hash_password
from poultry_api.database import Base, get_db
from poultry_api.main import app
from poultry_api.models import Batch, Breed, Customer, Farm, House, User, UserRole

TEST_PASSWORD = "testpassword123"


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Per-test SQLite database with foreign keys enforced."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and asserting on it outside a request."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with `get_db` on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

async def _add(session: AsyncSession, obj):
    session.add(obj)
    await session.commit()
    await session.refresh(obj)
    return obj


def _user(email: str, role: UserRole, first_name: str) -> User:
    return User(
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        first_name=first_name,
        last_name="Tester",
        role=role,
        is_active=True,
    )


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    return await _add(db_session, _user("owner@example.com", UserRole.FARM_OWNER, "Olive"))


@pytest_asyncio.fixture
async def other_owner(db_session: AsyncSession) -> User:
    return await _add(db_session, _user("other@example.com", UserRole.FARM_OWNER, "Oscar"))


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _add(db_session, _user("admin@example.com", UserRole.ADMIN, "Ada"))


def _token_for(user: User) -> str:
    return create_access_token(user.id, user.email, user.role.value)


@pytest.fixture
def auth_headers(owner: User) -> dict:
    """Authorization headers for the farm owner."""
    return {"Authorization": f"Bearer {_token_for(owner)}"}


@pytest.fixture
def other_headers(other_owner: User) -> dict:
    return {"Authorization": f"Bearer {_token_for(other_owner)}"}


@pytest.fixture
def admin_headers(admin: User) -> dict:
    return {"Authorization": f"Bearer {_token_for(admin)}"}


@pytest_asyncio.fixture
async def farm(db_session: AsyncSession, owner: User) -> Farm:
    return await _add(
        db_session,
        Farm(owner_id=owner.id, name="Sunrise Poultry", farm_type="mixed", province="Chiang Mai"),
    )


@pytest_asyncio.fixture
async def house(db_session: AsyncSession, farm: Farm) -> House:
    return await _add(
        db_session,
        House(farm_id=farm.id, house_code="H-01", name="House One", capacity=1000, area_sqm=400.0),
    )


@pytest_asyncio.fixture
async def broiler_breed(db_session: AsyncSession) -> Breed:
    return await _add(db_session, Breed(name="Ross 308", breed_type="broiler", fcr_standard=1.6))


@pytest_asyncio.fixture
async def layer_breed(db_session: AsyncSession) -> Breed:
    return await _add(db_session, Breed(name="Hy-Line Brown", breed_type="layer"))


@pytest_asyncio.fixture
async def batch(db_session: AsyncSession, farm: Farm, house: House, broiler_breed: Breed) -> Batch:
    """Active broiler batch of 900 birds in `house`."""
    return await _add(
        db_session,
        Batch(
            farm_id=farm.id,
            house_id=house.id,
            breed_id=broiler_breed.id,
            batch_code="B-2026-01",
            bird_type="broiler",
            initial_count=900,
            current_count=900,
            placement_date=date(2026, 9, 1),
            status="active",
        ),
    )


@pytest_asyncio.fixture
async def customer(db_session: AsyncSession, farm: Farm) -> Customer:
    return await _add(
        db_session,
        Customer(
            farm_id=farm.id,
            customer_code="CUST-001",
            customer_type="restaurant",
            company_name="Golden Wok",
            phone="0812345678",
        ),
    )
