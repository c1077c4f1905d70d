"""Gallery browsing, artwork detail, and artist submissions."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal, Optional

from fastapi import HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.config import settings

ArtworkStyle = Literal["abstract", "realism", "minimalist", "popart", "other"]
PriceBand = Literal["under50", "50to100", "over100"]


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class SubmitArtworkRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    shipping_cost: Decimal = Field(
        default=Decimal("0"), ge=0, max_digits=10, decimal_places=2,
    )
    style: ArtworkStyle
    image_path: str = Field(..., min_length=1, max_length=500)


class ArtworkResponse(BaseModel):
    id: uuid.UUID
    artist_id: uuid.UUID
    title: str
    description: Optional[str] = None
    price: Decimal
    shipping_cost: Decimal
    image_url: str
    style: str
    status: str
    sold: bool
    created_at: datetime


class BrowseArtworksResponse(BaseModel):
    artworks: list[ArtworkResponse]
    next_cursor: Optional[str] = None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

_ARTWORK_COLUMNS = (
    "id, artist_id, title, description, price, shipping_cost, "
    "image_path, style, status, sold, created_at"
)

# Inclusive on both ends for the middle band, as the gallery filter labels it.
_PRICE_BAND_SQL = {
    "under50": "price < 50",
    "50to100": "price >= 50 AND price <= 100",
    "over100": "price > 100",
}


def public_image_url(image_path: str) -> str:
    """Public object-storage URL for an uploaded artwork image."""
    base = settings.STORAGE_PUBLIC_URL.rstrip("/")
    return f"{base}/storage/v1/object/public/{settings.STORAGE_BUCKET}/{image_path}"


def _row_to_artwork(row) -> ArtworkResponse:
    """Map a database row to an ArtworkResponse."""
    return ArtworkResponse(
        id=row[0],
        artist_id=row[1],
        title=row[2],
        description=row[3],
        price=row[4],
        shipping_cost=row[5],
        image_url=public_image_url(row[6]),
        style=row[7],
        status=row[8],
        sold=row[9],
        created_at=row[10],
    )


def _gallery_filters(
    price_band: Optional[str],
    style: Optional[str],
) -> tuple[list[str], dict]:
    """Build WHERE clauses and params for the public gallery."""
    clauses = ["status = 'approved'"]
    params: dict = {}
    if price_band is not None:
        clauses.append(_PRICE_BAND_SQL[price_band])
    if style is not None:
        clauses.append("style = :style")
        params["style"] = style
    return clauses, params


async def _query_gallery(
    db: AsyncSession,
    price_band: Optional[str],
    style: Optional[str],
    cursor: Optional[str],
    fetch_limit: int,
):
    """Run the paginated query for approved artworks."""
    clauses, params = _gallery_filters(price_band, style)
    if cursor is not None:
        try:
            params["cursor_id"] = uuid.UUID(cursor)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid cursor")
        clauses.append(
            "(created_at, id) < ("
            "  SELECT created_at, id FROM artworks WHERE id = :cursor_id"
            ")"
        )
    params["fetch_limit"] = fetch_limit
    where = " AND ".join(clauses)
    return await db.execute(
        text(
            f"SELECT {_ARTWORK_COLUMNS} FROM artworks WHERE {where} "
            "ORDER BY created_at DESC, id DESC LIMIT :fetch_limit"
        ),
        params,
    )


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def browse_artworks(
    db: AsyncSession,
    price_band: Optional[str] = None,
    style: Optional[str] = None,
    cursor: Optional[str] = None,
    limit: int = 50,
) -> BrowseArtworksResponse:
    """Browse approved artworks, newest first, with cursor pagination (max 100)."""
    limit = min(max(limit, 1), 100)
    result = await _query_gallery(db, price_band, style, cursor, limit + 1)
    rows = result.fetchall()

    has_next = len(rows) > limit
    rows = rows[:limit] if has_next else rows

    artworks = [_row_to_artwork(r) for r in rows]
    next_cursor = str(artworks[-1].id) if has_next and artworks else None
    return BrowseArtworksResponse(artworks=artworks, next_cursor=next_cursor)


async def get_artwork(db: AsyncSession, artwork_id: uuid.UUID) -> ArtworkResponse:
    """Get a single approved artwork by ID."""
    result = await db.execute(
        text(f"SELECT {_ARTWORK_COLUMNS} FROM artworks "
             "WHERE id = :artwork_id AND status = 'approved'"),
        {"artwork_id": artwork_id},
    )
    row = result.fetchone()
    if row is None:
        raise HTTPException(status_code=404, detail="Artwork not found")
    return _row_to_artwork(row)


async def submit_artwork(
    db: AsyncSession,
    artist_id: uuid.UUID,
    body: SubmitArtworkRequest,
) -> uuid.UUID:
    """Insert a new artwork awaiting admin review.

    The image itself is already in object storage; only its path is stored.
    Returns the new artwork id.
    """
    artwork_id = uuid.uuid4()
    await db.execute(
        text(
            "INSERT INTO artworks "
            "(id, artist_id, title, description, price, shipping_cost, "
            "image_path, style, status, sold, created_at) "
            "VALUES (:id, :artist_id, :title, :description, :price, "
            ":shipping_cost, :image_path, :style, 'pending', false, :created_at)"
        ),
        {
            "id": artwork_id,
            "artist_id": artist_id,
            "title": body.title,
            "description": body.description,
            "price": body.price,
            "shipping_cost": body.shipping_cost,
            "image_path": body.image_path,
            "style": body.style,
            "created_at": datetime.now(timezone.utc),
        },
    )
    return artwork_id


async def list_artist_artworks(
    db: AsyncSession,
    artist_id: uuid.UUID,
    approved_only: bool = False,
) -> list[ArtworkResponse]:
    """List an artist's artworks, newest first."""
    status_clause = " AND status = 'approved'" if approved_only else ""
    result = await db.execute(
        text(
            f"SELECT {_ARTWORK_COLUMNS} FROM artworks "
            f"WHERE artist_id = :artist_id{status_clause} "
            "ORDER BY created_at DESC"
        ),
        {"artist_id": artist_id},
    )
    return [_row_to_artwork(r) for r in result.fetchall()]
