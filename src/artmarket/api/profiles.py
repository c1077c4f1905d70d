"""Profile endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.api.dependencies import get_current_user
from artmarket.database import get_db
from artmarket.models import Profile
from artmarket.services.auth_service import ProfileResponse
from artmarket.services.profile_service import PublicProfileResponse, get_profile

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def read_me(current_user: Profile = Depends(get_current_user)):
    """Return the caller's own profile, created on first sight."""
    return ProfileResponse.model_validate(current_user)


@router.get("/{profile_id}", response_model=PublicProfileResponse)
async def read_profile(
    profile_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Public profile with the artist's approved artworks."""
    return await get_profile(db, profile_id)
