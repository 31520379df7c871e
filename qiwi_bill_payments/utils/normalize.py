"""Value normalization for API payloads and notification signatures."""

import math
import uuid
from datetime import datetime, timedelta
from decimal import Context, Decimal, ROUND_HALF_DOWN
from typing import Any

AMOUNT_QUANTUM = Decimal("0.01")
# Wide enough for any finite float at two fractional digits.
AMOUNT_CONTEXT = Context(prec=400)


def _to_float(value: Any) -> float:
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def normalize_amount(amount: Any = 0) -> str:
    """
    Normalize an amount to the API string form.

    Rounds to two digits with round-half-down on the shortest decimal
    representation of the value, so ``200.345`` becomes ``"200.34"``.
    Missing or unparseable input is treated as zero.

    Args:
        amount: Number or numeric string

    Returns:
        Amount with exactly two fractional digits (e.g. "3.00")
    """
    value = Decimal(repr(_to_float(amount)))
    rounded = value.quantize(
        AMOUNT_QUANTUM, rounding=ROUND_HALF_DOWN, context=AMOUNT_CONTEXT
    )
    if rounded.is_zero():
        rounded = rounded.copy_abs()
    return f"{rounded:f}"


def normalize_date(date: datetime) -> str:
    """
    Format a datetime as ``YYYY-MM-DDThh:mm:ss+hh:mm``.

    Naive datetimes are taken as local time. UTC renders as ``+00:00``.
    """
    if date.tzinfo is None or date.utcoffset() is None:
        date = date.astimezone()
    return date.replace(microsecond=0).isoformat()


def get_lifetime_by_day(days: int = 45) -> str:
    """
    Bill expiration date ``days`` ahead of now.

    Args:
        days: Days of lifetime, at least 1

    Returns:
        Expiration date in API format
    """
    days = max(int(days), 1)
    return normalize_date((datetime.now() + timedelta(days=days)).astimezone())


def generate_id() -> str:
    """Generate a random UUID v4 bill identifier."""
    return str(uuid.uuid4())
