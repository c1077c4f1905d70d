"""Structured JSON audit logger for financial and negotiation events.

Emits structured log entries via structlog for checkout sessions, completed
sales, and offers.  Every entry carries an ``audit: true`` flag so
production log pipelines can filter on it easily.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog


log = structlog.get_logger()


def _money(value) -> str | None:
    return str(value) if value is not None else None


class AuditLogger:
    """Structured audit logger for marketplace events.

    All methods are synchronous -- they only emit log lines and perform
    no I/O beyond writing to the configured structlog sink.
    """

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def log_checkout(
        self,
        artwork_id,
        checkout_session_id: str,
        amount_minor: int,
        currency: str,
    ) -> None:
        """Record that a payment session was opened for an artwork."""
        log.info(
            "audit_event",
            event_type="checkout",
            timestamp=datetime.now(timezone.utc).isoformat(),
            artwork_id=str(artwork_id),
            checkout_session_id=checkout_session_id,
            amount_minor=amount_minor,
            currency=currency,
            audit=True,
        )

    # ------------------------------------------------------------------
    # Sale
    # ------------------------------------------------------------------

    def log_sale(self, sale_details: dict) -> None:
        """Log a fulfilled sale.

        Expected keys in *sale_details*: ``order_id``, ``artwork_id``,
        ``checkout_session_id``, ``price``, ``shipping_cost``,
        ``service_fee``, ``artist_earnings``.
        """
        log.info(
            "audit_event",
            event_type="sale",
            timestamp=datetime.now(timezone.utc).isoformat(),
            order_id=str(sale_details.get("order_id")),
            artwork_id=str(sale_details.get("artwork_id")),
            checkout_session_id=sale_details.get("checkout_session_id"),
            price=_money(sale_details.get("price")),
            shipping_cost=_money(sale_details.get("shipping_cost")),
            service_fee=_money(sale_details.get("service_fee")),
            artist_earnings=_money(sale_details.get("artist_earnings")),
            audit=True,
        )

    # ------------------------------------------------------------------
    # Offer
    # ------------------------------------------------------------------

    def log_offer(self, buyer_id, artist_id, artwork_id, amount) -> None:
        """Log an offer sent from a buyer to an artist."""
        log.info(
            "audit_event",
            event_type="offer",
            timestamp=datetime.now(timezone.utc).isoformat(),
            buyer_id=str(buyer_id),
            artist_id=str(artist_id),
            artwork_id=str(artwork_id),
            amount=_money(amount),
            audit=True,
        )
