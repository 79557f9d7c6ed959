"""
Money and quantity helpers.

All amounts are Decimal. Rounding is half away from zero on the cent,
the same as round(value * 100) / 100 on a till.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a number or numeric string to Decimal.

    Floats go through str() so 1.2 becomes Decimal("1.2"), not its
    binary expansion.

    Raises:
        InvalidOperation: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"Not a number: {value!r}")
    return Decimal(str(value))


def round2(value: Decimal) -> Decimal:
    """Round to 2 decimals, half away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(raw: Any) -> Optional[Decimal]:
    """
    Parse a user-entered amount.

    Accepts Dutch comma decimals: "1,25" → Decimal("1.25").

    Returns:
        Decimal, or None if the input is empty or not a finite number
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, Decimal)):
        text = str(raw)
    else:
        text = str(raw).strip().replace(",", ".")
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount
