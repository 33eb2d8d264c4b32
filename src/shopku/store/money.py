"""Money helpers."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN

from .conf import get_setting
from .exceptions import InvalidArgument

# Amount columns are DecimalField(max_digits=14, decimal_places=2)
MAX_AMOUNT = Decimal("999999999999.99")


def round_money(amount: Decimal, places: int | None = None) -> Decimal:
    """Round to the configured decimal places using banker's rounding.

    Raises:
        InvalidArgument: Amount has too many digits to round
    """
    if places is None:
        places = get_setting("MONEY_PLACES", 2)
    try:
        return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)
    except InvalidOperation as e:
        raise InvalidArgument("Amount out of range", {"amount": str(amount)}) from e
