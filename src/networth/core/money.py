"""Decimal helpers for money and rate values."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

MONEY_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0000000001")
ZERO = Decimal("0")
ONE = Decimal("1")


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert a numeric value to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value: Decimal) -> Decimal:
    """Round a value to the money quantum (cents)."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def to_rate(value: Decimal) -> Decimal:
    """Round an exchange rate to the stored rate precision."""
    return value.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)
