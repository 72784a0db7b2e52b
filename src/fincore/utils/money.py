"""Fixed-point money helpers.

Every amount handled by fincore is a ``Decimal`` quantized to cents. Floats
are accepted at the edges only and converted through ``str`` so that binary
representation noise never reaches the arithmetic.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Convert a number to a Decimal with exactly two decimal places.

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Decimal quantized to cents (half-up rounding)

    Raises:
        ValueError: If value is not numeric, not finite or too large
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Could not convert '{value}' to an amount") from e

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite, got '{value}'")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Amount out of range: '{value}'") from e


def to_cents(value: Decimal) -> int:
    """Return the integer number of cents in a money amount."""
    return int(to_money(value) * 100)


def from_cents(cents: int) -> Decimal:
    """Build a money amount from an integer number of cents."""
    return (Decimal(cents) / 100).quantize(CENT)


def money_sum(values) -> Decimal:
    """Sum an iterable of amounts, starting from 0.00."""
    return sum((to_money(v) for v in values), ZERO)


def format_money(amount: Decimal) -> str:
    """Format an amount for display (e.g., '1,234.50', '-50.00')."""
    return f"{to_money(amount):,.2f}"
