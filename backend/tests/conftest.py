"""Shared test fixtures."""

import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-notekeeper-tests-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from notekeeper.database import Base, get_db  # noqa: E402
from notekeeper.main import app  # noqa: E402
from notekeeper.rate_limiter import limiter  # noqa: E402
from notekeeper.services import EmailService  # noqa: E402

DEFAULT_DOB = "1995-06-15"


def make_session_factory():
    """In-memory SQLite with every table created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db_session():
    """A bare session for service-level tests."""
    session_factory = make_session_factory()
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    """Create test client with in-memory database.

    Yields a tuple of (TestClient, SessionMaker) for use in tests.
    """
    limiter.reset()

    testing_session_local = make_session_factory()

    def override_get_db():
        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client, testing_session_local

    app.dependency_overrides.clear()


@pytest.fixture
def sent_codes():
    """Capture mailed one-time codes instead of calling SendGrid.

    Yields a dict of email -> list of codes, newest last, and the mock.
    """
    codes: dict[str, list[str]] = {}

    def capture(email, code, expires_minutes=10):
        codes.setdefault(email, []).append(code)
        return True

    with patch.object(EmailService, "send_otp_email", side_effect=capture) as mock_send:
        yield codes, mock_send


def signup(test_client: TestClient, email: str, name: str = "Test User", dob: str = DEFAULT_DOB):
    return test_client.post(
        "/api/auth/signup",
        json={"email": email, "name": name, "dateOfBirth": dob},
    )


def signup_and_verify(test_client: TestClient, codes: dict, email: str, name: str = "Test User") -> str:
    """Helper to sign up and verify a user. Returns the bearer token."""
    response = signup(test_client, email, name)
    assert response.status_code == 201, response.json()

    response = test_client.post(
        "/api/auth/verify-otp",
        json={"email": email, "otp": codes[email][-1]},
    )
    assert response.status_code == 200, response.json()
    return response.json()["data"]["token"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
