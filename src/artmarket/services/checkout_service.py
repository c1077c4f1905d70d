"""Stripe Checkout for artwork purchases -- session creation and confirmation."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Optional

import stripe
import structlog
from fastapi import HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.config import settings
from artmarket.services.audit_logger import AuditLogger
from artmarket.services.pricing import to_minor_units

stripe.api_key = settings.STRIPE_SECRET_KEY

log = structlog.get_logger()
audit = AuditLogger()

SUCCESS_PATH = "/success?session_id={CHECKOUT_SESSION_ID}"
CANCEL_PATH = "/artwork/gallery"


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class CheckoutRequest(BaseModel):
    title: str = Field(..., min_length=1)
    price: Decimal
    shipping_cost: Optional[Decimal] = Field(default=None, alias="shippingCost")
    artwork_id: uuid.UUID = Field(..., alias="artworkId")

    model_config = {"populate_by_name": True}


class CheckoutResponse(BaseModel):
    url: Optional[str] = None
    session_id: str = Field(..., serialization_alias="sessionId")


class OrderStatusResponse(BaseModel):
    status: str
    artwork_id: Optional[uuid.UUID] = None
    buyer_email: Optional[str] = None
    price: Optional[Decimal] = None
    shipping_cost: Optional[Decimal] = None
    total: Optional[Decimal] = None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

async def _load_purchasable_artwork(
    db: AsyncSession,
    artwork_id: uuid.UUID,
) -> tuple[str, Decimal, Decimal]:
    """Fetch the authoritative title, price and shipping for an artwork.

    Returns (title, price, shipping_cost).
    """
    result = await db.execute(
        text(
            "SELECT title, price, shipping_cost, status, sold "
            "FROM artworks WHERE id = :artwork_id"
        ),
        {"artwork_id": artwork_id},
    )
    row = result.fetchone()

    if row is None or row[3] != "approved":
        raise HTTPException(status_code=404, detail="Artwork not found")
    if row[4]:
        raise HTTPException(status_code=409, detail="Artwork has already been sold")

    return row[0], row[1], row[2] or Decimal("0")


def _warn_on_client_mismatch(
    body: CheckoutRequest,
    price: Decimal,
    shipping_cost: Decimal,
) -> None:
    """Log when the client's displayed amounts disagree with the store."""
    client_shipping = body.shipping_cost or Decimal("0")
    if body.price != price or client_shipping != shipping_cost:
        log.warning(
            "checkout_price_mismatch",
            artwork_id=str(body.artwork_id),
            client_price=str(body.price),
            client_shipping=str(client_shipping),
            price=str(price),
            shipping_cost=str(shipping_cost),
        )


def _gateway_error_message(exc: stripe.StripeError) -> str:
    """User-facing text from a Stripe error, never our own traceback."""
    return getattr(exc, "user_message", None) or "Checkout failed"


# ---------------------------------------------------------------------------
# Checkout session creation
# ---------------------------------------------------------------------------

async def create_checkout_session(
    db: AsyncSession,
    body: CheckoutRequest,
    origin: str,
) -> CheckoutResponse:
    """Create a Stripe Checkout Session for a single artwork.

    The charged amount is always sourced from the store, never from the
    request body. Returns the hosted page URL and the session id.
    """
    title, price, shipping_cost = await _load_purchasable_artwork(db, body.artwork_id)
    _warn_on_client_mismatch(body, price, shipping_cost)

    amount_minor = to_minor_units(price, shipping_cost)
    origin = origin.rstrip("/")

    try:
        session = stripe.checkout.Session.create(
            payment_method_types=["card"],
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": settings.CURRENCY,
                        "unit_amount": amount_minor,
                        "product_data": {"name": title},
                    },
                    "quantity": 1,
                }
            ],
            metadata={"artworkId": str(body.artwork_id)},
            billing_address_collection="required",
            success_url=f"{origin}{SUCCESS_PATH}",
            cancel_url=f"{origin}{CANCEL_PATH}",
        )
    except stripe.StripeError as exc:
        log.error(
            "checkout_session_failed",
            artwork_id=str(body.artwork_id),
            error=str(exc),
        )
        raise HTTPException(status_code=500, detail=_gateway_error_message(exc))

    audit.log_checkout(body.artwork_id, session.id, amount_minor, settings.CURRENCY)
    return CheckoutResponse(url=session.url, session_id=session.id)


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------

async def get_order_status(
    db: AsyncSession,
    checkout_session_id: str,
) -> OrderStatusResponse:
    """Report whether the webhook has recorded an order for a session yet."""
    result = await db.execute(
        text(
            "SELECT artwork_id, buyer_email, price, shipping_cost "
            "FROM orders WHERE checkout_session_id = :session_id"
        ),
        {"session_id": checkout_session_id},
    )
    row = result.fetchone()
    if row is None:
        return OrderStatusResponse(status="pending")

    return OrderStatusResponse(
        status="completed",
        artwork_id=row[0],
        buyer_email=row[1],
        price=row[2],
        shipping_cost=row[3],
        total=row[2] + row[3],
    )
