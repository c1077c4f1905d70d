#!/usr/bin/env python3
"""Sold-artwork / order reconciliation script.

Every artwork marked sold must have exactly one order, and every order must
point at a sold artwork. Reports rows that break either rule, along with
orders whose stored fee split no longer matches the current fee rate.

Usage:
    DATABASE_URL=postgresql://... python scripts/reconcile_orders.py

Exit codes:
    0 -- everything matches
    1 -- one or more discrepancies found
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

import asyncpg  # type: ignore[import-untyped]

DEFAULT_DATABASE_URL = "postgresql://app:devpassword@db:5432/artmarket"
SERVICE_FEE_RATE = Decimal(os.environ.get("SERVICE_FEE_RATE", "0.08"))


def _get_dsn() -> str:
    """Return a raw ``postgresql://`` DSN (strip any SQLAlchemy dialect prefix)."""
    url = os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)
    for prefix in ("postgresql+asyncpg://", "postgresql+psycopg2://"):
        if url.startswith(prefix):
            url = "postgresql://" + url[len(prefix):]
    return url


def _expected_fee(price: Decimal) -> Decimal:
    return (price * SERVICE_FEE_RATE).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


async def reconcile(dsn: str) -> list[dict]:
    """Run the reconciliation and return a list of discrepancy dicts."""
    conn: asyncpg.Connection = await asyncpg.connect(dsn)
    try:
        sold_without_order = await conn.fetch(
            """
            SELECT a.id FROM artworks a
            LEFT JOIN orders o ON o.artwork_id = a.id
            WHERE a.sold AND o.id IS NULL
            """
        )
        order_counts = await conn.fetch(
            """
            SELECT artwork_id, COUNT(*) AS n FROM orders
            GROUP BY artwork_id HAVING COUNT(*) > 1
            """
        )
        orders_on_unsold = await conn.fetch(
            """
            SELECT o.id, o.artwork_id FROM orders o
            JOIN artworks a ON a.id = o.artwork_id
            WHERE NOT a.sold
            """
        )
        orders = await conn.fetch("SELECT id, price, service_fee FROM orders")
    finally:
        await conn.close()

    discrepancies: list[dict] = []
    for row in sold_without_order:
        discrepancies.append({"kind": "sold_without_order", "artwork_id": str(row["id"])})
    for row in order_counts:
        discrepancies.append({
            "kind": "multiple_orders",
            "artwork_id": str(row["artwork_id"]),
            "orders": row["n"],
        })
    for row in orders_on_unsold:
        discrepancies.append({
            "kind": "order_on_unsold_artwork",
            "order_id": str(row["id"]),
            "artwork_id": str(row["artwork_id"]),
        })
    for row in orders:
        expected = _expected_fee(row["price"])
        if row["service_fee"] != expected:
            discrepancies.append({
                "kind": "fee_mismatch",
                "order_id": str(row["id"]),
                "stored_fee": str(row["service_fee"]),
                "expected_fee": str(expected),
            })
    return discrepancies


async def main() -> int:
    discrepancies = await reconcile(_get_dsn())

    report = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_discrepancies": len(discrepancies),
        "discrepancies": discrepancies,
    }

    json.dump(report, sys.stdout, indent=2)
    sys.stdout.write("\n")

    return 1 if discrepancies else 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
