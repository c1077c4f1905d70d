"""Shared FastAPI dependencies for authenticated routes."""

from __future__ import annotations

import structlog
from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.database import get_db
from artmarket.models import Profile
from artmarket.services.auth_service import Identity, ensure_profile, verify_token

log = structlog.get_logger()

# Optional bearer scheme -- auto_error=False so we can fall back to cookies
_bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(
    credentials: HTTPAuthorizationCredentials | None,
    access_token: str | None,
) -> str | None:
    """Bearer header first, then the ``access_token`` cookie."""
    if credentials is not None:
        return credentials.credentials
    return access_token


def require_identity(identity: Identity | None) -> Identity:
    """Raise HTTPException(401) when the request carried no usable identity."""
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


async def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    access_token: str | None = Cookie(default=None),
) -> Identity | None:
    """Verified identity of the caller, or None.

    Touches no storage, so a route can validate its input before deciding
    whether the caller must be signed in. An invalid token counts as absent.
    """
    token = _extract_token(credentials, access_token)
    if token is None:
        return None
    try:
        return verify_token(token)
    except HTTPException as exc:
        log.info("optional_identity_rejected", reason=exc.detail)
        return None


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    access_token: str | None = Cookie(default=None),
) -> Profile:
    """Resolve the request's identity to a Profile.

    Token sources (checked in order):
      1. Authorization: Bearer <token> header
      2. ``access_token`` cookie

    Raises HTTPException(401) if no valid token is found.
    """
    token = _extract_token(credentials, access_token)
    if token is None:
        require_identity(None)

    identity = verify_token(token)
    profile = await ensure_profile(db, identity)
    await db.commit()
    return profile
