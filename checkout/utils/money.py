"""checkout.utils.money"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

_SYMBOLS = {"AUD": "$", "USD": "$", "NZD": "$", "EUR": "€", "GBP": "£"}


def to_decimal(value: Any) -> Decimal:
    """Coerce ints/floats/strings to a 2dp Decimal. Floats go through str() first."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise ValueError(f"Not a monetary amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(amount: Any, currency: str = "AUD") -> str:
    symbol = _SYMBOLS.get((currency or "").upper(), "")
    return f"{symbol}{to_decimal(amount):,.2f}"


def to_minor_units(amount: Any) -> int:
    """Dollars → cents, as the card gateway expects."""
    return int((to_decimal(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
