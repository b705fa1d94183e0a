"""
Decimal helpers for bill and order arithmetic.

Key Principles:
1. NEVER use float for money
2. Line amounts are always recomputed as quantity x rate, never accumulated
3. Quantize to 2 places with ROUND_HALF_UP (the way printed bills round)
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

from core_backend.exceptions import InvalidInput

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number, field: str = "value") -> Decimal:
    """
    Convert user input to Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1") rather than its
    binary approximation.

    Raises:
        InvalidInput: if the value is missing or not numeric
    """
    if value is None or value == "":
        raise InvalidInput(f"{field} is required", {"field": field})
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number", {"field": field, "value": str(value)})


def quantize_money(value: Number) -> Decimal:
    """Round to 2 decimal places."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_amount(quantity: Number, rate: Number) -> Decimal:
    """
    Amount for one line.

    Examples:
        >>> line_amount(2, Decimal("20"))
        Decimal('40.00')
        >>> line_amount(Decimal("-1"), Decimal("15.50"))
        Decimal('-15.50')
    """
    return quantize_money(to_decimal(quantity, "quantity") * to_decimal(rate, "rate"))


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    return quantize_money(sum(amounts, ZERO))
