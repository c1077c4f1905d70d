"""Identity resolution: verify auth-provider JWTs and load the caller's profile.

Sign-up, sign-in and session issuance belong to the hosted auth provider.
This service only trusts access tokens it can verify with the shared
``JWT_SECRET_KEY`` and maps their subject onto a ``profiles`` row.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import HTTPException, status
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.config import settings
from artmarket.models import Profile

log = structlog.get_logger()

_ALGORITHMS = ["HS256"]


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------


class Identity(BaseModel):
    """Claims of a verified access token."""
    user_id: UUID
    email: str
    role: str = "artist"


class ProfileResponse(BaseModel):
    id: UUID
    email: str
    username: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    role: str

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------


def verify_token(token: str) -> Identity:
    """Decode and validate an access token issued by the auth provider.

    Raises:
        HTTPException(401) if the token is invalid, expired, addressed to
        another audience, or carries no usable subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=_ALGORITHMS,
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no valid subject",
        )

    metadata = payload.get("user_metadata") or {}
    role = metadata.get("role") if metadata.get("role") in ("artist", "buyer") else "artist"
    return Identity(user_id=user_id, email=payload.get("email") or "", role=role)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


async def ensure_profile(db: AsyncSession, identity: Identity) -> Profile:
    """Return the caller's profile, creating it on first sight of the identity."""
    result = await db.execute(select(Profile).where(Profile.id == identity.user_id))
    profile = result.scalar_one_or_none()
    if profile is not None:
        return profile

    profile = Profile(id=identity.user_id, email=identity.email, role=identity.role)
    db.add(profile)
    await db.flush()
    log.info("profile_created", user_id=str(identity.user_id), role=identity.role)
    return profile
