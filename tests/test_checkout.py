"""Tests for checkout session creation and the checkout API endpoints.

All Stripe API calls are mocked -- no real Stripe account is required.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import stripe
from fastapi import HTTPException

from artmarket.services.checkout_service import (
    CheckoutRequest,
    create_checkout_session,
    get_order_status,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ARTWORK_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")
ORIGIN = "https://shop.example.com"


def _row(*values):
    """Create a lightweight tuple-like object returned by fetchone."""
    return values


def _db_returning(row):
    db = AsyncMock()
    result = MagicMock()
    result.fetchone.return_value = row
    db.execute.return_value = result
    return db


def _fake_session(session_id: str = "cs_test_123", url: str = "https://checkout.stripe.com/c/pay/cs_test_123"):
    session = MagicMock()
    session.id = session_id
    session.url = url
    return session


def _request(price="100", shipping="10") -> CheckoutRequest:
    return CheckoutRequest(
        title="Harbour at Dusk",
        price=Decimal(price),
        shippingCost=Decimal(shipping) if shipping is not None else None,
        artworkId=ARTWORK_ID,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_checkout_charges_price_plus_shipping_in_pence():
    """price 100 + shipping 10 -> 11000 minor units with artworkId metadata."""
    db = _db_returning(_row("Harbour at Dusk", Decimal("100.00"), Decimal("10.00"), "approved", False))

    with patch("stripe.checkout.Session.create", return_value=_fake_session()) as mock_create:
        response = await create_checkout_session(db, _request(), ORIGIN)

    kwargs = mock_create.call_args.kwargs
    line_item = kwargs["line_items"][0]
    assert line_item["price_data"]["unit_amount"] == 11000
    assert line_item["price_data"]["currency"] == "gbp"
    assert line_item["price_data"]["product_data"]["name"] == "Harbour at Dusk"
    assert line_item["quantity"] == 1
    assert kwargs["mode"] == "payment"
    assert kwargs["metadata"] == {"artworkId": str(ARTWORK_ID)}
    assert kwargs["success_url"] == f"{ORIGIN}/success?session_id={{CHECKOUT_SESSION_ID}}"
    assert kwargs["cancel_url"] == f"{ORIGIN}/artwork/gallery"

    assert response.session_id == "cs_test_123"
    assert response.url.startswith("https://checkout.stripe.com/")


@pytest.mark.asyncio
async def test_checkout_uses_stored_price_not_client_price():
    """A tampered client price is ignored; the store's amounts are charged."""
    db = _db_returning(_row("Harbour at Dusk", Decimal("250.00"), Decimal("15.00"), "approved", False))

    with (
        patch("stripe.checkout.Session.create", return_value=_fake_session()) as mock_create,
        patch("artmarket.services.checkout_service.log") as mock_log,
    ):
        await create_checkout_session(db, _request(price="1", shipping="0"), ORIGIN)

    unit_amount = mock_create.call_args.kwargs["line_items"][0]["price_data"]["unit_amount"]
    assert unit_amount == 26500
    mock_log.warning.assert_called_once()
    assert mock_log.warning.call_args.args[0] == "checkout_price_mismatch"


@pytest.mark.asyncio
async def test_checkout_strips_trailing_slash_from_origin():
    db = _db_returning(_row("Harbour at Dusk", Decimal("100.00"), Decimal("0.00"), "approved", False))

    with patch("stripe.checkout.Session.create", return_value=_fake_session()) as mock_create:
        await create_checkout_session(db, _request(shipping=None), "http://test/")

    assert mock_create.call_args.kwargs["cancel_url"] == "http://test/artwork/gallery"


@pytest.mark.asyncio
async def test_checkout_unknown_artwork_is_404():
    db = _db_returning(None)

    with patch("stripe.checkout.Session.create") as mock_create:
        with pytest.raises(HTTPException) as exc_info:
            await create_checkout_session(db, _request(), ORIGIN)

    assert exc_info.value.status_code == 404
    mock_create.assert_not_called()


@pytest.mark.asyncio
async def test_checkout_unapproved_artwork_is_404():
    db = _db_returning(_row("Draft", Decimal("100.00"), Decimal("0.00"), "pending", False))

    with pytest.raises(HTTPException) as exc_info:
        await create_checkout_session(db, _request(), ORIGIN)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_checkout_sold_artwork_is_409():
    """A sold artwork can never be purchased again."""
    db = _db_returning(_row("Harbour at Dusk", Decimal("100.00"), Decimal("10.00"), "approved", True))

    with patch("stripe.checkout.Session.create") as mock_create:
        with pytest.raises(HTTPException) as exc_info:
            await create_checkout_session(db, _request(), ORIGIN)

    assert exc_info.value.status_code == 409
    mock_create.assert_not_called()


@pytest.mark.asyncio
async def test_checkout_gateway_error_surfaces_gateway_message():
    db = _db_returning(_row("Harbour at Dusk", Decimal("100.00"), Decimal("10.00"), "approved", False))

    with patch(
        "stripe.checkout.Session.create",
        side_effect=stripe.StripeError("Currency not supported"),
    ):
        with pytest.raises(HTTPException) as exc_info:
            await create_checkout_session(db, _request(), ORIGIN)

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Currency not supported"


@pytest.mark.asyncio
async def test_order_status_pending_until_webhook_lands():
    status = await get_order_status(_db_returning(None), "cs_test_123")

    assert status.status == "pending"
    assert status.artwork_id is None


@pytest.mark.asyncio
async def test_order_status_completed():
    db = _db_returning(_row(ARTWORK_ID, "buyer@example.com", Decimal("100.00"), Decimal("10.00")))

    status = await get_order_status(db, "cs_test_123")

    assert status.status == "completed"
    assert status.artwork_id == ARTWORK_ID
    assert status.total == Decimal("110.00")


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_checkout_endpoint_returns_url_and_session_id(client, mock_db):
    result = MagicMock()
    result.fetchone.return_value = _row("Harbour at Dusk", Decimal("100.00"), Decimal("10.00"), "approved", False)
    mock_db.execute.return_value = result

    with patch("stripe.checkout.Session.create", return_value=_fake_session()) as mock_create:
        response = await client.post(
            "/api/v1/checkout",
            json={
                "title": "Harbour at Dusk",
                "price": 100,
                "shippingCost": 10,
                "artworkId": str(ARTWORK_ID),
            },
            headers={"Origin": ORIGIN},
        )

    assert response.status_code == 200
    body = response.json()
    assert body["sessionId"] == "cs_test_123"
    assert body["url"] == "https://checkout.stripe.com/c/pay/cs_test_123"
    assert mock_create.call_args.kwargs["success_url"].startswith(ORIGIN)


@pytest.mark.asyncio
async def test_checkout_endpoint_missing_fields_is_400(client, mock_db):
    with patch("stripe.checkout.Session.create") as mock_create:
        response = await client.post("/api/v1/checkout", json={"title": "No id"})

    assert response.status_code == 400
    assert "error" in response.json()
    mock_create.assert_not_called()
    mock_db.execute.assert_not_called()


@pytest.mark.asyncio
async def test_checkout_endpoint_sold_artwork_error_shape(client, mock_db):
    result = MagicMock()
    result.fetchone.return_value = _row("Harbour at Dusk", Decimal("100.00"), Decimal("10.00"), "approved", True)
    mock_db.execute.return_value = result

    response = await client.post(
        "/api/v1/checkout",
        json={"title": "Harbour at Dusk", "price": 100, "artworkId": str(ARTWORK_ID)},
    )

    assert response.status_code == 409
    assert response.json() == {"error": "Artwork has already been sold"}
