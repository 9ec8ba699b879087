"""Shared test fixtures for MedConnect API tests."""

from datetime import date, timedelta
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient

from medconnect.config import Settings
from medconnect.main import create_app

ADMIN_EMAIL = "admin@medconnect.test"
ADMIN_PASSWORD = "admin-secret"


def next_weekday(weekday: int, weeks_ahead: int = 1) -> date:
    """A future date falling on the given weekday (Monday=0)"""
    start = date.today() + timedelta(days=1)
    offset = (weekday - start.weekday()) % 7
    return start + timedelta(days=offset + 7 * (weeks_ahead - 1))


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def settings() -> Settings:
    """In-memory database, fixed secret, bootstrap admin."""
    return Settings(
        database_url="sqlite://",
        secret_key="test-secret-key",
        log_slow_queries=False,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        slot_minutes=30,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    # Context manager runs the lifespan: tables + bootstrap admin
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app, client):
    session = app.state.database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def register(client):
    """Register a patient and return (token, account body)."""

    def _register(name: str = "Pat Patient", email: str = "pat@example.com", password: str = "secret123"):
        response = client.post(
            "/api/users", json={"name": name, "email": email, "password": password}
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["token"], body

    return _register


@pytest.fixture
def login(client):
    def _login(email: str, password: str) -> str:
        response = client.post("/api/users/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["token"]

    return _login


@pytest.fixture
def admin_headers(login) -> dict:
    return auth(login(ADMIN_EMAIL, ADMIN_PASSWORD))


@pytest.fixture
def create_doctor(client, admin_headers, login):
    """Create a doctor account + profile as admin; returns (doctor body, doctor headers)."""

    def _create(
        name: str = "Dr. Asha Rao",
        email: str = "asha@example.com",
        specialization: str = "Cardiology",
        timings: Optional[list] = None,
        **extra,
    ):
        payload = {
            "name": name,
            "email": email,
            "password": "doctor123",
            "specialization": specialization,
            **extra,
        }
        if timings is not None:
            payload["timings"] = timings
        response = client.post("/api/doctors", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json(), auth(login(email, "doctor123"))

    return _create


@pytest.fixture
def patient(register):
    """(account body, headers) for a default patient."""
    token, body = register()
    return body, auth(token)


@pytest.fixture
def doctor(create_doctor):
    """(doctor profile body, headers) for a default doctor with the default template."""
    return create_doctor()
