# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

Routes are mounted on a bare FastAPI app (no lifespan) so tests never
touch the database or start the real scheduler.
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from web_api.auth import create_jwt
from web_api.routes.notifications import router as notifications_router
from web_api.routes.settings import router as settings_router


@pytest.fixture(autouse=True)
def _jwt_secret():
    """Sign and verify session tokens with a fixed test secret."""
    with patch("web_api.auth.JWT_SECRET", "test-secret"):
        yield


@pytest.fixture
def app():
    app = FastAPI()
    app.include_router(settings_router)
    app.include_router(notifications_router)
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_client(client):
    client.cookies.set("session", create_jwt(1, "admin", "admin"))
    return client


@pytest.fixture
def staff_client(client):
    client.cookies.set("session", create_jwt(2, "desk", "staff"))
    return client
