"""Tests for session token helpers and auth dependencies."""

from unittest.mock import patch

import jwt
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from web_api.auth import create_jwt, get_current_user, require_admin, verify_jwt


@pytest.fixture
def app_with_protected_routes():
    app = FastAPI()

    @app.get("/test-user")
    async def user_route(user=Depends(get_current_user)):
        return {"sub": user["sub"]}

    @app.get("/test-admin")
    async def admin_route(user=Depends(require_admin)):
        return {"sub": user["sub"], "is_admin": True}

    return app


class TestJwt:
    def test_round_trip_claims(self):
        token = create_jwt(7, "asha", "admin")
        payload = verify_jwt(token)

        assert payload["sub"] == "7"
        assert payload["username"] == "asha"
        assert payload["role"] == "admin"
        assert payload["exp"] > payload["iat"]

    def test_wrong_secret_is_rejected(self):
        token = jwt.encode({"sub": "7"}, "other-secret", algorithm="HS256")
        assert verify_jwt(token) is None

    def test_garbage_is_rejected(self):
        assert verify_jwt("invalid.jwt.token") is None

    def test_token_from_dashboard_login_is_accepted(self):
        # Same claims and secret the login service signs with
        token = jwt.encode(
            {"sub": "3", "username": "owner", "role": "admin"},
            "test-secret",
            algorithm="HS256",
        )
        assert verify_jwt(token)["role"] == "admin"

    def test_missing_secret_raises(self):
        with patch("web_api.auth.JWT_SECRET", None):
            with pytest.raises(ValueError, match="JWT_SECRET"):
                create_jwt(1, "asha", "admin")


class TestGetCurrentUser:
    def test_no_cookie_returns_401(self, app_with_protected_routes):
        response = TestClient(app_with_protected_routes).get("/test-user")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_invalid_token_returns_401(self, app_with_protected_routes):
        client = TestClient(app_with_protected_routes)
        client.cookies.set("session", "invalid.jwt.token")
        assert client.get("/test-user").status_code == 401

    def test_valid_token(self, app_with_protected_routes):
        client = TestClient(app_with_protected_routes)
        client.cookies.set("session", create_jwt(2, "desk", "staff"))
        response = client.get("/test-user")
        assert response.status_code == 200
        assert response.json() == {"sub": "2"}


class TestRequireAdmin:
    def test_rejects_staff(self, app_with_protected_routes):
        client = TestClient(app_with_protected_routes)
        client.cookies.set("session", create_jwt(2, "desk", "staff"))
        assert client.get("/test-admin").status_code == 403

    def test_allows_admin(self, app_with_protected_routes):
        client = TestClient(app_with_protected_routes)
        client.cookies.set("session", create_jwt(1, "admin", "admin"))
        response = client.get("/test-admin")
        assert response.status_code == 200
        assert response.json()["is_admin"] is True
