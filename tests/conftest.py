"""
Pytest configuration: env vars are set before any zenit import so Settings and
the engine pick up the temporary sqlite database.
"""

import asyncio
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="zenit-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/zenit.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENV"] = "test"
os.environ["BUSINESS_TIMEZONE"] = "America/Sao_Paulo"

from datetime import date, datetime, time
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from zenit.core.config import settings
from zenit.core.db import async_session_maker, drop_db, init_db
from zenit.core.security import hash_password
from zenit.main import app
from zenit.models.profile import Profile, Role
from zenit.models.service import Service
from zenit.services.slot_service import business_today, upcoming_booking_days

PASSWORD = "massagem123"


async def _add(*rows):
    async with async_session_maker() as session:
        for row in rows:
            session.add(row)
        await session.commit()
        for row in rows:
            await session.refresh(row)
    return rows


def add_rows(*rows):
    return asyncio.run(_add(*rows))


def local_time(d: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(d, time(hour, minute), tzinfo=ZoneInfo(settings.business_timezone))


@pytest.fixture
def db():
    asyncio.run(init_db())
    yield
    asyncio.run(drop_db())


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def services(db) -> dict[str, Service]:
    relaxing, reflexology, retired = add_rows(
        Service(name="Massagem Relaxante", description="Relaxamento", duration_minutes=60, price=Decimal("150.00")),
        Service(name="Reflexologia", description=None, duration_minutes=30, price=Decimal("90.00")),
        Service(name="Shiatsu", duration_minutes=60, price=Decimal("170.00"), is_active=False),
    )
    return {"relaxing": relaxing, "reflexology": reflexology, "retired": retired}


@pytest.fixture
def booking_day() -> date:
    return upcoming_booking_days(business_today())[0]


def _signup(client: TestClient, email: str, full_name: str) -> dict[str, str]:
    response = client.post(
        "/api/v1/auth/signup",
        json={"email": email, "password": PASSWORD, "full_name": full_name},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client) -> dict[str, str]:
    return _signup(client, "ana@example.com", "Ana Souza")


@pytest.fixture
def other_auth_headers(client) -> dict[str, str]:
    return _signup(client, "bruno@example.com", "Bruno Lima")


@pytest.fixture
def therapist_headers(client) -> dict[str, str]:
    add_rows(
        Profile(
            email="carla@example.com",
            full_name="Carla Mendes",
            role=Role.THERAPIST.value,
            hashed_password=hash_password(PASSWORD),
        )
    )
    response = client.post("/api/v1/auth/login", json={"email": "carla@example.com", "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
