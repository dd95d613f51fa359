# core/money.py

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def money(v) -> Decimal:
    """Quantize any numeric-ish value to 2dp (ROUND_HALF_UP). Empty -> 0.00."""
    if v is None or v == "":
        return ZERO
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        logger.warning("Invalid money value encountered", extra={"value": v})
        return ZERO


def to_minor_units(amount) -> int:
    """2dp currency amount -> integer minor units (grosze / cents)."""
    try:
        major = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError("amount must be a valid Decimal") from exc
    minor = (major * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


def from_minor_units(minor) -> Decimal:
    return money(Decimal(str(int(minor))) / Decimal("100"))


def money_str(v) -> str:
    # String form avoids float serialization issues in JSON payloads
    return f"{money(v):.2f}"
