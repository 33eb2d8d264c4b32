"""Coercion of loosely-typed JSON and query-string values."""

from decimal import Decimal, InvalidOperation

MAX_INT_DIGITS = 18


def to_decimal(value) -> Decimal | None:
    """Return a finite Decimal for numbers and numeric strings, else None.

    Booleans are rejected even though ``bool`` is an ``int`` subclass.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
    else:
        return None

    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def to_int(value) -> int | None:
    """Return an int for whole-number values ("3", 3, 3.0), else None.

    Values of more than 18 digits are rejected rather than expanded.
    """
    number = to_decimal(value)
    if number is None or number.adjusted() >= MAX_INT_DIGITS:
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


def to_positive_int(value) -> int | None:
    number = to_int(value)
    if number is None or number <= 0:
        return None
    return number
