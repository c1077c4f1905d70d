"""Stripe webhook handling -- verify, mark the artwork sold, record the order.

Stripe delivers events at least once. Every write for one event happens in
the caller's transaction, and the sequence is safe to replay:

* the event id is recorded in ``processed_webhooks``;
* an order already stored for the checkout session short-circuits;
* the sold flag only flips when it is still false;
* ``orders.checkout_session_id`` is unique.

Any failure propagates so the endpoint answers non-2xx and Stripe retries.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

import stripe
import structlog
from fastapi import HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.config import settings
from artmarket.services.audit_logger import AuditLogger
from artmarket.services.pricing import FeeSplit, calculate_fee_split

log = structlog.get_logger()
audit = AuditLogger()

CHECKOUT_COMPLETED = "checkout.session.completed"


# ---------------------------------------------------------------------------
# Webhook helpers
# ---------------------------------------------------------------------------

def _check_event_shape(event) -> dict:
    """Raise ValueError unless *event* carries the fields the handler reads."""
    if not isinstance(event, dict):
        raise ValueError("event is not an object")
    if not isinstance(event.get("id"), str) or not isinstance(event.get("type"), str):
        raise ValueError("event has no id or type")
    data = event.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("object"), dict):
        raise ValueError("event has no data object")
    if event["type"] == CHECKOUT_COMPLETED and not isinstance(data["object"].get("id"), str):
        raise ValueError("checkout session has no id")
    return event


def _verify_stripe_event(payload: bytes, sig_header: str) -> dict:
    """Verify the Stripe webhook signature and return the parsed event."""
    try:
        stripe.WebhookSignature.verify_header(
            payload.decode("utf-8"),
            sig_header,
            settings.STRIPE_WEBHOOK_SECRET,
            stripe.Webhook.DEFAULT_TOLERANCE,
        )
        return _check_event_shape(json.loads(payload))
    except stripe.SignatureVerificationError:
        log.warning("webhook_signature_invalid")
        raise HTTPException(status_code=400, detail="Invalid signature")
    except ValueError:
        log.warning("webhook_payload_invalid")
        raise HTTPException(status_code=400, detail="Invalid payload")


async def _is_already_processed(db: AsyncSession, event_id: str) -> bool:
    """Return True if this webhook event has already been handled."""
    existing = await db.execute(
        text("SELECT 1 FROM processed_webhooks WHERE event_id = :event_id"),
        {"event_id": event_id},
    )
    return existing.fetchone() is not None


async def _order_exists(db: AsyncSession, checkout_session_id: str) -> bool:
    """Return True if an order was already recorded for this checkout session."""
    existing = await db.execute(
        text("SELECT 1 FROM orders WHERE checkout_session_id = :session_id"),
        {"session_id": checkout_session_id},
    )
    return existing.fetchone() is not None


async def _mark_artwork_sold(db: AsyncSession, artwork_id: uuid.UUID):
    """Flip sold to true if it is still false.

    Returns (price, shipping_cost) of the artwork, read in the same
    statement. Raises HTTPException(500) when no unsold row matched.
    """
    result = await db.execute(
        text(
            "UPDATE artworks SET sold = true "
            "WHERE id = :artwork_id AND sold = false "
            "RETURNING price, shipping_cost"
        ),
        {"artwork_id": artwork_id},
    )
    row = result.fetchone()
    if row is None:
        log.error("artwork_already_sold_or_missing", artwork_id=str(artwork_id))
        raise HTTPException(status_code=500, detail="Failed to update artwork")
    return row[0], row[1]


async def _insert_order(
    db: AsyncSession,
    order_id: uuid.UUID,
    artwork_id: uuid.UUID,
    checkout_session_id: str,
    customer_details: dict,
    split: FeeSplit,
) -> None:
    """Insert the orders row for a completed checkout."""
    address = customer_details.get("address")
    await db.execute(
        text(
            "INSERT INTO orders "
            "(id, artwork_id, checkout_session_id, buyer_email, "
            "shipping_address, price, shipping_cost, service_fee, "
            "artist_earnings, created_at) "
            "VALUES (:id, :artwork_id, :checkout_session_id, :buyer_email, "
            "CAST(:shipping_address AS JSONB), :price, :shipping_cost, "
            ":service_fee, :artist_earnings, :created_at) "
            "ON CONFLICT (checkout_session_id) DO NOTHING"
        ),
        {
            "id": order_id,
            "artwork_id": artwork_id,
            "checkout_session_id": checkout_session_id,
            "buyer_email": customer_details.get("email"),
            "shipping_address": json.dumps(address) if address is not None else None,
            **split.model_dump(),
            "created_at": datetime.now(timezone.utc),
        },
    )


async def _mark_event_processed(db: AsyncSession, event_id: str) -> None:
    """Record a webhook event ID so it is not replayed."""
    await db.execute(
        text(
            "INSERT INTO processed_webhooks (event_id, processed_at) "
            "VALUES (:event_id, :processed_at) "
            "ON CONFLICT (event_id) DO NOTHING"
        ),
        {"event_id": event_id, "processed_at": datetime.now(timezone.utc)},
    )


def _object_field(obj: dict, key: str) -> dict:
    value = obj.get(key)
    return value if isinstance(value, dict) else {}


def _parse_artwork_id(metadata: dict) -> uuid.UUID | None:
    raw = metadata.get("artworkId")
    if not raw:
        return None
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


async def _process_checkout_completed(db: AsyncSession, session_obj: dict) -> None:
    """Fulfil a completed checkout: mark sold, split the money, record the order."""
    checkout_session_id: str = session_obj["id"]
    artwork_id = _parse_artwork_id(_object_field(session_obj, "metadata"))

    if artwork_id is None:
        log.warning("webhook_missing_artwork_id", checkout_session_id=checkout_session_id)
        return

    if await _order_exists(db, checkout_session_id):
        log.info("webhook_order_already_recorded", checkout_session_id=checkout_session_id)
        return

    price, shipping_cost = await _mark_artwork_sold(db, artwork_id)
    split = calculate_fee_split(price, shipping_cost)

    order_id = uuid.uuid4()
    await _insert_order(
        db, order_id, artwork_id, checkout_session_id,
        _object_field(session_obj, "customer_details"), split,
    )
    audit.log_sale({
        "order_id": order_id,
        "artwork_id": artwork_id,
        "checkout_session_id": checkout_session_id,
        **split.model_dump(),
    })


# ---------------------------------------------------------------------------
# Webhook entry-point
# ---------------------------------------------------------------------------

async def handle_webhook(
    payload: bytes,
    sig_header: str,
    db: AsyncSession,
) -> None:
    """Verify a Stripe webhook signature and apply the event.

    Idempotent -- skips events that have already been processed. Commits
    only once every write for the event has succeeded.
    """
    event = _verify_stripe_event(payload, sig_header)
    event_id: str = event["id"]

    try:
        if await _is_already_processed(db, event_id):
            log.info("webhook_already_processed", event_id=event_id)
            return

        if event["type"] == CHECKOUT_COMPLETED:
            await _process_checkout_completed(db, event["data"]["object"])

        await _mark_event_processed(db, event_id)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        log.error("webhook_store_error", event_id=event_id, error=str(exc))
        raise HTTPException(status_code=500, detail="Failed to record order")
    except HTTPException:
        await db.rollback()
        raise
