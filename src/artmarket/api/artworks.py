"""Gallery, artwork submission, and offer endpoints."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.api.dependencies import (
    get_current_user,
    get_optional_identity,
    require_identity,
)
from artmarket.database import get_db
from artmarket.models import Profile
from artmarket.services.artwork_service import (
    ArtworkResponse,
    ArtworkStyle,
    BrowseArtworksResponse,
    PriceBand,
    SubmitArtworkRequest,
    browse_artworks,
    get_artwork,
    list_artist_artworks,
    submit_artwork,
)
from artmarket.services.auth_service import Identity, ensure_profile
from artmarket.services.offer_service import (
    OfferRequest,
    OfferResponse,
    prepare_offer,
    send_offer,
)

router = APIRouter(prefix="/api/v1/artworks", tags=["artworks"])


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=BrowseArtworksResponse)
async def browse_artworks_endpoint(
    price_band: Optional[PriceBand] = Query(default=None),
    style: Optional[ArtworkStyle] = Query(default=None),
    cursor: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Browse approved artworks with optional price band and style filters."""
    return await browse_artworks(
        db=db, price_band=price_band, style=style, cursor=cursor, limit=limit,
    )


@router.get("/mine", response_model=list[ArtworkResponse])
async def my_artworks_endpoint(
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's own submissions in every review state."""
    return await list_artist_artworks(db, current_user.id)


@router.get("/{artwork_id}", response_model=ArtworkResponse)
async def get_artwork_endpoint(
    artwork_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get details for a single approved artwork."""
    return await get_artwork(db=db, artwork_id=artwork_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_artwork_endpoint(
    body: SubmitArtworkRequest,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit an artwork for admin review."""
    artwork_id = await submit_artwork(db, current_user.id, body)
    await db.commit()
    return {"artwork_id": str(artwork_id), "status": "pending"}


@router.post(
    "/{artwork_id}/offers",
    response_model=OfferResponse,
    status_code=status.HTTP_201_CREATED,
)
async def make_offer_endpoint(
    artwork_id: uuid.UUID,
    body: OfferRequest,
    identity: Identity | None = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db),
):
    """Send the artist a price offer as a message.

    The offer is validated before the caller is required to be signed in.
    """
    offer = await prepare_offer(db, artwork_id, body.offer)
    buyer = await ensure_profile(db, require_identity(identity))
    response = await send_offer(db, buyer.id, offer)
    await db.commit()
    return response
