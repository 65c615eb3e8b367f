from decimal import ROUND_HALF_UP, Decimal, DivisionByZero, InvalidOperation, localcontext
from typing import Any, Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through repr so 0.1 stays 0.1
        return Decimal(repr(value))
    return Decimal(value)


def to_cents(value: Any) -> Decimal:
    """Round a monetary value to cents the way the persistence layer does."""
    amount = to_decimal(value)
    if not amount.is_finite():
        return amount
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def total(values: Iterable[Any]) -> Decimal:
    return sum((to_decimal(value) for value in values), ZERO)


def percentage(part: Any, whole: Any) -> Decimal:
    """part / whole * 100, or 0 when whole is 0."""
    whole = to_decimal(whole)
    if whole == 0:
        return ZERO
    return to_decimal(part) / whole * HUNDRED


def raw_percentage(part: Any, whole: Any) -> Decimal:
    """part / whole * 100 with IEEE-style results for a zero denominator.

    x / 0 gives signed Infinity and 0 / 0 gives NaN instead of raising.
    """
    with localcontext() as ctx:
        ctx.traps[DivisionByZero] = False
        ctx.traps[InvalidOperation] = False
        return to_decimal(part) / to_decimal(whole) * HUNDRED


def to_percent(value: Any) -> Decimal:
    """Round a percentage for display; Infinity and NaN pass through."""
    return to_cents(value)
