"""
JWT session utilities for the admin web API.

Security measures implemented:
- HS256 signing algorithm
- Token expiration (24 hours)
- Token read from the HttpOnly "session" cookie

Tokens are issued by the dashboard login (POST /api/auth/login in the
user-management service, which checks the password against the users table)
and signed with the same JWT_SECRET. create_jwt defines the claim set that
login produces (sub, username, role, iat, exp); this service only verifies it.
"""

import os
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, Request

from core.enums import UserRole

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = 24


def create_jwt(user_id: int, username: str, role: str) -> str:
    """
    Create a signed JWT token for an authenticated user.

    Args:
        user_id: The user's database id
        username: The user's login name
        role: "admin" or "staff"

    Returns:
        Signed JWT token string
    """
    if not JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable not set")

    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_jwt(token: str) -> dict | None:
    """
    Verify and decode a JWT token.

    Returns:
        Decoded payload dict if valid, None if invalid
    """
    if not JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable not set")

    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


async def get_current_user(request: Request) -> dict:
    """
    FastAPI dependency to get the current authenticated user.

    Raises:
        HTTPException: 401 if not authenticated or invalid token
    """
    token = request.cookies.get("session")
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = verify_jwt(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return payload


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    """
    FastAPI dependency that only lets administrators through.

    Raises:
        HTTPException: 403 if the user is not an admin
    """
    if user.get("role") != UserRole.admin.value:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
