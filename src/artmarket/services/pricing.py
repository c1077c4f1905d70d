"""Money arithmetic for checkout amounts, offers, and the sale fee split.

All amounts are ``Decimal`` in major currency units. Rounding is
half-up to match what buyers see on the hosted payment page.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pydantic import BaseModel

from artmarket.config import settings

_PENNY = Decimal("0.01")
_UNIT = Decimal("1")

# Largest value a NUMERIC(10,2) column holds.
MAX_AMOUNT = Decimal("99999999.99")

CURRENCY_SYMBOLS = {"gbp": "£", "usd": "$", "eur": "€"}


class FeeSplit(BaseModel):
    """Platform fee and artist payout for a single sale."""
    price: Decimal
    shipping_cost: Decimal
    service_fee: Decimal
    artist_earnings: Decimal


def quantize_money(amount: Decimal) -> Decimal:
    """Round to whole pennies."""
    return amount.quantize(_PENNY, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    """Render an amount in the configured currency, e.g. ``£60.00`` or ``60.00 SEK``."""
    currency = settings.CURRENCY.lower()
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{quantize_money(amount)} {currency.upper()}"
    return f"{symbol}{quantize_money(amount)}"


def parse_amount(raw) -> Decimal | None:
    """Parse a user-supplied amount; return None when it is not a finite number."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def to_minor_units(price: Decimal, shipping_cost: Decimal | None = None) -> int:
    """Total chargeable amount (price plus shipping) in pence."""
    total = price + (shipping_cost or Decimal("0"))
    return int((total * 100).quantize(_UNIT, rounding=ROUND_HALF_UP))


def calculate_service_fee(price: Decimal) -> Decimal:
    """Platform fee: SERVICE_FEE_RATE of the price, rounded to pennies."""
    return quantize_money(price * settings.SERVICE_FEE_RATE)


def calculate_fee_split(price: Decimal, shipping_cost: Decimal | None) -> FeeSplit:
    """Split a sale into the platform fee and the artist's earnings.

    The artist keeps the price less the fee and is reimbursed the full
    shipping cost.
    """
    shipping = shipping_cost or Decimal("0")
    service_fee = calculate_service_fee(price)
    artist_earnings = quantize_money(price - service_fee + shipping)
    return FeeSplit(
        price=price,
        shipping_cost=shipping,
        service_fee=service_fee,
        artist_earnings=artist_earnings,
    )


def minimum_offer(price: Decimal) -> Decimal:
    """Lowest acceptable offer for a listed price."""
    return price * settings.MIN_OFFER_RATIO
