# tests/conftest.py

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from barbershop import models  # noqa: F401
from barbershop.db import get_session
from barbershop.main import app
from barbershop.models import Service, WeeklyAvailability, WeeklyTimeInterval


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(engine):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def register_and_login(client: TestClient, email: str, role: str, name: str = None) -> dict:
    password = "secret-pass-123"
    r = client.post("/users", json={"email": email, "password": password, "role": role, "name": name})
    assert r.status_code == 201, r.text

    r = client.post("/auth/login", data={"username": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def barber_headers(client):
    return register_and_login(client, "barber@shop.com", "barber", "Joao")


@pytest.fixture
def client_headers(client):
    return register_and_login(client, "client@mail.com", "client", "Maria")


@pytest.fixture
def admin_headers(client):
    return register_and_login(client, "admin@shop.com", "admin", "Admin")


def upcoming(weekday: int, min_days_ahead: int = 7) -> date:
    """First date at least `min_days_ahead` days from today falling on `weekday` (0=Sun ... 6=Sat)."""
    day = date.today() + timedelta(days=min_days_ahead)
    while day.isoweekday() % 7 != weekday:
        day += timedelta(days=1)
    return day


def add_weekly(session: Session, barber_email: str, weekday: int, *intervals, is_active: bool = True):
    row = WeeklyAvailability(barber_email=barber_email, weekday=weekday, is_active=is_active)
    row.intervals = [WeeklyTimeInterval(start_time=s, end_time=e) for s, e in intervals]
    session.add(row)
    session.commit()
    return row


def add_service(session: Session, name: str, minutes: int, price: float = 50.0, is_active: bool = True):
    service = Service(name=name, duration_minutes=minutes, price=price, is_active=is_active)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service
