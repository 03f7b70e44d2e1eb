"""Pay computation for a walk."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENTS = Decimal("0.01")


def compute_amount_due(duration_minutes: int, hourly_rate: Optional[Decimal]) -> Optional[Decimal]:
    """
    Amount owed for a walk: rate * minutes / 60, rounded half-up to cents.

    Returns None when no rate is known.
    """
    if hourly_rate is None:
        return None
    rate = Decimal(str(hourly_rate))
    if duration_minutes < 0:
        raise ValueError("duration_minutes must be non-negative")
    if rate < 0:
        raise ValueError("hourly_rate must be non-negative")
    amount = rate * Decimal(duration_minutes) / Decimal(60)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(amount: Optional[Decimal]) -> str:
    value = Decimal(str(amount or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"${value}"
