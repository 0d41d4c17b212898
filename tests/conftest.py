"""Shared fixtures: a throwaway SQLite database per test and an API client bound to it."""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import rento.models  # noqa: F401
from rento.core.security import hash_password
from rento.database import Base, get_db
from rento.main import app
from rento.models.user import User
from rento.models.vehicle import Vehicle

API = "/api/v1"
PASSWORD = "Rento2024pass"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rento.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def client(session_maker):
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
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register(client: AsyncClient, name: str, email: str, role: str) -> tuple[dict, dict]:
    """Register an account and return (user, auth headers)."""
    response = await client.post(
        f"{API}/auth/register",
        json={"name": name, "email": email, "password": PASSWORD, "role": role},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    return data["user"], {"Authorization": f"Bearer {data['access_token']}"}


@pytest.fixture
async def owner(client):
    return await register(client, "Arjun Mehta", "arjun@rento.io", "owner")


@pytest.fixture
async def renter(client):
    return await register(client, "Priya Nair", "priya@rento.io", "renter")


@pytest.fixture
async def other_renter(client):
    return await register(client, "Kabir Rao", "kabir@rento.io", "renter")


@pytest.fixture
async def vehicle(client, owner):
    _, headers = owner
    response = await client.post(
        f"{API}/vehicles/",
        json={
            "name": "Swift Dzire",
            "category": "car",
            "brand": "Maruti",
            "model": "Dzire",
            "year": 2022,
            "location": "Kochi",
            "features": ["ac", "bluetooth"],
            "price_per_day": "300",
            "price_per_week": "1800",
            "price_per_month": "7000",
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def book(client: AsyncClient, headers: dict, vehicle_id: str, start: str, end: str):
    return await client.post(
        f"{API}/bookings/",
        json={"vehicle_id": vehicle_id, "start_date": start, "end_date": end},
        headers=headers,
    )


async def set_status(client: AsyncClient, headers: dict, booking_id: str, status: str):
    return await client.patch(
        f"{API}/bookings/{booking_id}/status",
        json={"status": status},
        headers=headers,
    )


@pytest.fixture
async def seeded(session_maker):
    """An owner, two renters and a vehicle written straight to the database."""
    async with session_maker() as session:
        owner = User(
            name="Arjun Mehta",
            email="arjun@rento.io",
            password_hash=hash_password(PASSWORD),
            role="owner",
        )
        first = User(
            name="Priya Nair",
            email="priya@rento.io",
            password_hash=hash_password(PASSWORD),
            role="renter",
        )
        second = User(
            name="Kabir Rao",
            email="kabir@rento.io",
            password_hash=hash_password(PASSWORD),
            role="renter",
        )
        session.add_all([owner, first, second])
        await session.flush()

        vehicle = Vehicle(
            owner_id=owner.id,
            name="Royal Enfield Classic",
            category="bike",
            price_per_day=Decimal("300"),
            price_per_week=Decimal("1800"),
            price_per_month=Decimal("7000"),
            currency="INR",
        )
        session.add(vehicle)
        await session.commit()

    return {"owner": owner, "renters": (first, second), "vehicle": vehicle}
