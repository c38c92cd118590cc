"""
Currency arithmetic helpers.

Every monetary value in the system is a ``decimal.Decimal`` rounded to whole
cents. Rounding happens after EVERY addition or subtraction rather than once
at the end: the stored ledgers and reports are expected to reproduce exact
cent values, and deferring the rounding would let sub-cent residue from
imported amounts leak into running balances.

Rounding mode is half away from zero (Decimal's ROUND_HALF_UP), so
0.005 -> 0.01 and -0.005 -> -0.01.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated

from pydantic import AfterValidator, PlainSerializer

from club_finance.exceptions import AmountOutOfRangeError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_currency(value: Decimal | int | str) -> Decimal:
    """
    Round a value to two decimal places, half away from zero.

    Raises:
        AmountOutOfRangeError: If the value has too many digits to carry
            cents at the context precision (28 significant digits).
    """
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise AmountOutOfRangeError(value) from exc


def add_currency(*values: Decimal) -> Decimal:
    """Sum values left to right, rounding after each step."""
    total = ZERO
    for value in values:
        total = round_currency(total + value)
    return total


def format_currency(value: Decimal) -> str:
    """Format an amount for report text, e.g. ``$1234.50`` or ``$-12.00``."""
    return f"${round_currency(value)}"


# Pydantic field type for money: accepts JSON numbers or strings, rounds to
# cents on the way in and serializes back out as a JSON number. Out-of-range
# amounts fail validation (AmountOutOfRangeError is a ValueError).
Money = Annotated[
    Decimal,
    AfterValidator(round_currency),
    PlainSerializer(float, return_type=float, when_used="json"),
]
