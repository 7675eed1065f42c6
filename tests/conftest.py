"""
Shared fixtures.

APP_ENV must be set before `models` is imported: DBStorage picks its engine
at import time, and "test" selects a process-wide in-memory SQLite database.
"""
import os

os.environ["APP_ENV"] = "test"

import pytest

from models import storage
from models.user_store import UserStore
from utils.security import hash_password
from utils.tokens import TokenService


@pytest.fixture(autouse=True)
def fresh_db():
    """Every test starts from empty tables (ids restart at 1)."""
    storage.reset()
    yield
    storage.close()


@pytest.fixture
def app():
    from api import create_app

    return create_app("test")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users():
    return UserStore(storage)


@pytest.fixture
def token_service(users):
    return TokenService.from_config(
        {
            "ACCESS_TOKEN_SECRET": "test_access",
            "REFRESH_TOKEN_SECRET": "test_refresh",
            "ACCESS_TOKEN_EXPIRES": "15m",
            "REFRESH_TOKEN_EXPIRES": "7d",
        },
        users,
    )


@pytest.fixture
def user(users):
    return users.create("alice@example.com", hash_password("secret123"))


def register(client, email="alice@example.com", password="secret123"):
    """Register through the API and return the access token."""
    response = client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.get_json()
    return response.get_json()["access_token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
