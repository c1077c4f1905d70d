"""Price offers -- validated, then sent to the artist as an ordinary message."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Union

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.services.audit_logger import AuditLogger
from artmarket.services.message_service import insert_message
from artmarket.services.pricing import (
    MAX_AMOUNT,
    format_money,
    minimum_offer,
    parse_amount,
    quantize_money,
)

audit = AuditLogger()


class OfferRequest(BaseModel):
    # Kept loose so a non-numeric offer gets the same message as a low one.
    offer: Union[str, float, int, None] = None


class OfferResponse(BaseModel):
    message_id: uuid.UUID
    thread_url: str


class PreparedOffer(BaseModel):
    """A validated offer, not yet attributed to a buyer."""
    artwork_id: uuid.UUID
    artwork_title: str
    artist_id: uuid.UUID
    amount: Decimal


def compose_offer_message(amount: Decimal, artwork_title: str) -> str:
    return f'Hi, I\'d like to offer {format_money(amount)} for "{artwork_title}".'


def validate_offer(raw, price: Decimal) -> Decimal:
    """Return the offer amount or raise HTTPException(400).

    An offer must be numeric and at least MIN_OFFER_RATIO of the price;
    exactly the minimum is accepted. Amounts the orders table could not
    hold are refused.
    """
    floor = minimum_offer(price)
    amount = parse_amount(raw)
    if amount is None or amount < floor:
        raise HTTPException(
            status_code=400,
            detail=f"Offers must be at least {format_money(floor)}",
        )
    if amount > MAX_AMOUNT:
        raise HTTPException(
            status_code=400,
            detail=f"Offers must be at most {format_money(MAX_AMOUNT)}",
        )
    return amount


async def _fetch_offer_target(
    db: AsyncSession,
    artwork_id: uuid.UUID,
) -> tuple[str, Decimal, uuid.UUID]:
    """Return (title, price, artist_id) for an artwork open to offers."""
    result = await db.execute(
        text("SELECT title, price, artist_id, sold FROM artworks WHERE id = :artwork_id"),
        {"artwork_id": artwork_id},
    )
    row = result.fetchone()
    if row is None:
        raise HTTPException(status_code=404, detail="Artwork not found")
    if row[3]:
        raise HTTPException(status_code=409, detail="Artwork has already been sold")
    return row[0], row[1], row[2]


async def prepare_offer(
    db: AsyncSession,
    artwork_id: uuid.UUID,
    raw_offer,
) -> PreparedOffer:
    """Look up the artwork and validate the amount. Writes nothing."""
    title, price, artist_id = await _fetch_offer_target(db, artwork_id)
    amount = validate_offer(raw_offer, price)
    return PreparedOffer(
        artwork_id=artwork_id,
        artwork_title=title,
        artist_id=artist_id,
        amount=amount,
    )


async def send_offer(
    db: AsyncSession,
    buyer_id: uuid.UUID,
    offer: PreparedOffer,
) -> OfferResponse:
    """Deliver a validated offer from *buyer_id* to the artist."""
    if offer.artist_id == buyer_id:
        raise HTTPException(status_code=400, detail="You cannot make an offer on your own artwork")

    message_id = await insert_message(
        db,
        artwork_id=offer.artwork_id,
        sender_id=buyer_id,
        receiver_id=offer.artist_id,
        content=compose_offer_message(offer.amount, offer.artwork_title),
    )
    audit.log_offer(buyer_id, offer.artist_id, offer.artwork_id, quantize_money(offer.amount))

    return OfferResponse(
        message_id=message_id,
        thread_url=f"/messages/{offer.artwork_id}/{offer.artist_id}",
    )


async def submit_offer(
    db: AsyncSession,
    buyer_id: uuid.UUID,
    artwork_id: uuid.UUID,
    raw_offer,
) -> OfferResponse:
    """Validate an offer and deliver it to the artist.

    Nothing is written when validation fails. Returns the message id and
    the thread the buyer should be taken to.
    """
    offer = await prepare_offer(db, artwork_id, raw_offer)
    return await send_offer(db, buyer_id, offer)
