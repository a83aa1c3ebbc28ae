import os

import pytest

# Ensure JWT_SECRET is set before the app config is imported
os.environ.setdefault("JWT_SECRET", "test_secret")

from evntify.auth_service.utils import create_token, hash_password
from evntify.database.memory_store import MemoryStore
from evntify.gateway.server import create_app


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def app(store):
    app = create_app(
        {"TESTING": True, "JWT_SECRET": "test_secret", "STORE_BACKEND": "memory"},
        store=store,
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def bearer():
    """Authorization header for a token."""
    def _bearer(token):
        return {"Authorization": f"Bearer {token}"}

    return _bearer


@pytest.fixture
def signup(client):
    """
    Register a user through the API.
    Returns (token, user) from the response body.
    """
    def _signup(name="Alice", email="a@x.com", password="secret123"):
        response = client.post("/api/register", json={
            "name": name,
            "email": email,
            "password": password,
        })
        assert response.status_code == 201, response.get_json()
        data = response.get_json()
        return data["token"], data["user"]

    return _signup


@pytest.fixture
def admin_token(app, store):
    admin = store.create_user("Admin", "admin@x.com", hash_password("adminpass"), role="admin")
    with app.app_context():
        return create_token(admin)


@pytest.fixture
def event_payload():
    return {
        "title": "Tech Meetup",
        "description": "Monthly meetup",
        "date": "2025-05-01",
        "location": "Room 101",
        "time": "18:00",
        "capacity": 2,
        "price": 10,
    }


@pytest.fixture
def create_event(client, event_payload, bearer):
    def _create(token, **overrides):
        payload = dict(event_payload, **overrides)
        response = client.post("/api/events", json=payload, headers=bearer(token))
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _create
