"""Tests for access-token verification, profile resolution, and /profiles/me."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException
from jose import jwt

from artmarket.config import settings
from artmarket.services.auth_service import Identity, ensure_profile, verify_token

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_TEST_SECRET = "test-secret-key-for-unit-tests"
USER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")


def _token(
    sub: str | None = str(USER_ID),
    audience: str = "authenticated",
    expires_in: timedelta = timedelta(minutes=5),
    role: str | None = None,
    secret: str = _TEST_SECRET,
) -> str:
    claims = {
        "aud": audience,
        "email": "artist@example.com",
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    if sub is not None:
        claims["sub"] = sub
    if role is not None:
        claims["user_metadata"] = {"role": role}
    return jwt.encode(claims, secret, algorithm="HS256")


def _build_scalar_result(value):
    """Return a mock SQLAlchemy result whose scalar_one_or_none() returns *value*."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture(autouse=True)
def jwt_secret():
    with patch.object(settings, "JWT_SECRET_KEY", _TEST_SECRET):
        yield


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------

def test_verify_valid_token():
    identity = verify_token(_token(role="buyer"))

    assert identity.user_id == USER_ID
    assert identity.email == "artist@example.com"
    assert identity.role == "buyer"


def test_role_defaults_to_artist():
    assert verify_token(_token()).role == "artist"


def test_unknown_role_falls_back_to_artist():
    assert verify_token(_token(role="admin")).role == "artist"


@pytest.mark.parametrize(
    "token",
    [
        pytest.param(lambda: _token(expires_in=timedelta(minutes=-1)), id="expired"),
        pytest.param(lambda: _token(audience="anon"), id="wrong-audience"),
        pytest.param(lambda: _token(secret="another-secret"), id="wrong-secret"),
        pytest.param(lambda: "not.a.jwt", id="garbage"),
    ],
)
def test_invalid_tokens_rejected(token):
    with pytest.raises(HTTPException) as exc_info:
        verify_token(token())

    assert exc_info.value.status_code == 401


def test_token_without_subject_rejected():
    with pytest.raises(HTTPException) as exc_info:
        verify_token(_token(sub=None))

    assert exc_info.value.status_code == 401


def test_token_with_non_uuid_subject_rejected():
    with pytest.raises(HTTPException) as exc_info:
        verify_token(_token(sub="user-42"))

    assert exc_info.value.status_code == 401


# ---------------------------------------------------------------------------
# Profile resolution
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_existing_profile_returned():
    existing = MagicMock()
    db = AsyncMock()
    db.add = MagicMock()
    db.execute.return_value = _build_scalar_result(existing)

    profile = await ensure_profile(db, Identity(user_id=USER_ID, email="a@example.com"))

    assert profile is existing
    db.add.assert_not_called()


@pytest.mark.asyncio
async def test_profile_created_on_first_sight():
    db = AsyncMock()
    db.add = MagicMock()
    db.execute.return_value = _build_scalar_result(None)

    profile = await ensure_profile(
        db, Identity(user_id=USER_ID, email="a@example.com", role="buyer"),
    )

    db.add.assert_called_once_with(profile)
    db.flush.assert_awaited_once()
    assert profile.id == USER_ID
    assert profile.role == "buyer"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_me_requires_token(client, mock_db):
    response = await client.get("/api/v1/profiles/me")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


@pytest.mark.asyncio
async def test_me_with_bearer_token(client, mock_db):
    existing = MagicMock()
    existing.id = USER_ID
    existing.email = "artist@example.com"
    existing.username = "alice"
    existing.avatar_url = None
    existing.bio = None
    existing.role = "artist"
    mock_db.execute.return_value = _build_scalar_result(existing)

    response = await client.get(
        "/api/v1/profiles/me",
        headers={"Authorization": f"Bearer {_token()}"},
    )

    assert response.status_code == 200
    assert response.json()["id"] == str(USER_ID)
    assert response.json()["username"] == "alice"


@pytest.mark.asyncio
async def test_me_with_cookie_token(client, mock_db):
    existing = MagicMock()
    existing.id = USER_ID
    existing.email = "artist@example.com"
    existing.username = None
    existing.avatar_url = None
    existing.bio = None
    existing.role = "artist"
    mock_db.execute.return_value = _build_scalar_result(existing)

    response = await client.get(
        "/api/v1/profiles/me",
        headers={"Cookie": f"access_token={_token()}"},
    )

    assert response.status_code == 200
    assert response.json()["email"] == "artist@example.com"


@pytest.mark.asyncio
async def test_me_with_expired_token(client, mock_db):
    response = await client.get(
        "/api/v1/profiles/me",
        headers={"Authorization": f"Bearer {_token(expires_in=timedelta(minutes=-1))}"},
    )

    assert response.status_code == 401
    mock_db.execute.assert_not_called()
