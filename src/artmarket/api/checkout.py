"""Checkout API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.database import get_db
from artmarket.services.checkout_service import (
    CheckoutRequest,
    CheckoutResponse,
    OrderStatusResponse,
    create_checkout_session,
    get_order_status,
)

router = APIRouter(prefix="/api/v1/checkout", tags=["checkout"])


def _request_origin(request: Request) -> str:
    """Origin the buyer came from; success/cancel URLs are built on it."""
    return request.headers.get("origin") or str(request.base_url)


@router.post("", response_model=CheckoutResponse)
async def start_checkout(
    body: CheckoutRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Create a Stripe Checkout Session for an artwork."""
    return await create_checkout_session(db, body, _request_origin(request))


@router.get("/sessions/{session_id}", response_model=OrderStatusResponse)
async def checkout_session_status(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Report the order recorded for a checkout session, if any."""
    return await get_order_status(db, session_id)
