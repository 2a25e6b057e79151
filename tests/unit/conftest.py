"""Shared pytest configuration for unit tests."""
from datetime import datetime, timezone

import bcrypt
import pytest
from firebase_admin import firestore

from tasktrack.app import create_app
from fake_firestore import FakeFirestore

TEST_SECRET = "unit-test-secret-key-that-is-long-enough"
COOKIE_NAME = "userJWT"


@pytest.fixture
def fake_db():
    """Fresh in-memory Firestore for each test."""
    return FakeFirestore()


@pytest.fixture
def app(fake_db, monkeypatch):
    monkeypatch.setattr(firestore, "client", lambda *args, **kwargs: fake_db)
    app = create_app({
        "TESTING": True,
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
        "LOG_LEVEL": "WARNING",
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session_service(app):
    return app.extensions["session_service"]


@pytest.fixture
def make_user(fake_db):
    """Insert a user document directly and return its id."""
    def _make_user(name="Staff", email=None, password="secret", role="Employee", manager_id=None):
        password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=4)).decode()
        return fake_db.add("users", {
            "name": name,
            "email": email or f"{name.lower().replace(' ', '.')}@example.com",
            "password": password_hash,
            "role": role,
            "manager_id": manager_id,
            "created_at": "2024-01-01T00:00:00+00:00",
        })
    return _make_user


@pytest.fixture
def make_task(fake_db):
    """Insert a task document directly and return its id."""
    def _make_task(created_by, title="Task", details="Details",
                   date=datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc), assigned_to=None):
        return fake_db.add("tasks", {
            "title": title,
            "details": details,
            "date": date,
            "assigned_to": list(assigned_to or []),
            "created_by": created_by,
            "created_at": "2024-01-01T00:00:00+00:00",
            "updated_at": "2024-01-01T00:00:00+00:00",
        })
    return _make_task


@pytest.fixture
def login_as(client, session_service):
    """Put a signed session cookie for ``user_id``/``role`` on the test client."""
    def _login_as(user_id, role="Manager"):
        token = session_service.sign(user_id, role)
        client.set_cookie(COOKIE_NAME, token)
        return token
    return _login_as
