"""Public artist profiles."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.services.artwork_service import ArtworkResponse, list_artist_artworks


class PublicProfileResponse(BaseModel):
    id: uuid.UUID
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    artworks: list[ArtworkResponse]


async def get_profile(db: AsyncSession, profile_id: uuid.UUID) -> PublicProfileResponse:
    """Return a profile with its approved artworks."""
    result = await db.execute(
        text("SELECT id, username, avatar_url, bio FROM profiles WHERE id = :id"),
        {"id": profile_id},
    )
    row = result.fetchone()
    if row is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    artworks = await list_artist_artworks(db, profile_id, approved_only=True)
    return PublicProfileResponse(
        id=row[0],
        username=row[1],
        avatar_url=row[2],
        bio=row[3],
        artworks=artworks,
    )
