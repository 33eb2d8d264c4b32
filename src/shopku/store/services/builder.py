"""Order request validation.

Turns a loosely-typed checkout payload into an ``OrderRequest`` before any
write happens. Nothing in this module touches the database.

Prices come from the caller's snapshot, not from a catalog lookup; the
computed total is what gets persisted.
"""

import re
from decimal import Decimal
from typing import NamedTuple

from ..conf import get_unselected_method, get_wallet_method
from ..exceptions import InvalidPayload
from ..models import Order
from ..money import MAX_AMOUNT, round_money
from ..parsing import to_decimal, to_positive_int

NAME_MAX_LENGTH = 255

# PositiveIntegerField is safe up to this on every supported backend
MAX_QUANTITY = 2147483647

_WHITESPACE = re.compile(r"\s")


class LineItem(NamedTuple):
    """One validated order line."""

    product_id: int
    quantity: int
    price: Decimal
    name: str

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class OrderRequest(NamedTuple):
    """A validated checkout, ready for the wallet and order store."""

    user_id: object
    payment_method: str
    items: tuple[LineItem, ...]
    total: Decimal

    @property
    def pays_with_wallet(self) -> bool:
        return self.payment_method == get_wallet_method()


def normalize_payment_method(raw) -> str:
    """Uppercase the label and replace whitespace with underscores.

    Missing, blank or non-string labels become the unselected sentinel.
    """
    if not isinstance(raw, str) or not raw.strip():
        return get_unselected_method()
    return _WHITESPACE.sub("_", raw.strip().upper())


def parse_line_item(raw) -> LineItem:
    """Validate one payload entry.

    Raises:
        InvalidPayload: Entry is not an object or a field is missing/invalid
    """
    if not isinstance(raw, dict):
        raise InvalidPayload("Invalid items payload")

    product_id = to_positive_int(raw.get("product_id"))
    quantity = to_positive_int(raw.get("quantity"))
    price = to_decimal(raw.get("price"))
    name = raw.get("name")

    if product_id is None:
        raise InvalidPayload("Invalid items payload", {"field": "product_id"})
    if quantity is None or quantity > MAX_QUANTITY:
        raise InvalidPayload("Invalid items payload", {"field": "quantity"})
    if price is None or price <= 0 or price > MAX_AMOUNT:
        raise InvalidPayload("Invalid items payload", {"field": "price"})
    if not isinstance(name, str) or not name.strip() or len(name) > NAME_MAX_LENGTH:
        raise InvalidPayload("Invalid items payload", {"field": "name"})

    price = round_money(price)
    if price <= 0:
        raise InvalidPayload("Invalid items payload", {"field": "price"})

    return LineItem(product_id=product_id, quantity=quantity, price=price, name=name)


def build_order(user_id, payment_method_raw, raw_items) -> OrderRequest:
    """Validate a checkout payload and compute its total.

    All-or-nothing: one bad entry rejects the whole request.

    Args:
        user_id: Id of the ordering user
        payment_method_raw: Free-form payment label from the client
        raw_items: List of {product_id, quantity, price, name} objects

    Returns:
        OrderRequest with normalized payment method and total

    Raises:
        InvalidPayload: Empty/non-list items, any malformed entry, a total
            beyond the amount columns or an overlong payment label
    """
    if not isinstance(raw_items, (list, tuple)) or not raw_items:
        raise InvalidPayload("No items provided")

    items = tuple(parse_line_item(raw) for raw in raw_items)
    total = sum((item.subtotal for item in items), Decimal("0"))
    if total > MAX_AMOUNT:
        raise InvalidPayload("Order total is too large", {"field": "total"})
    total = round_money(total)

    payment_method = normalize_payment_method(payment_method_raw)
    if len(payment_method) > Order._meta.get_field("payment_method").max_length:
        raise InvalidPayload("Invalid payment method", {"field": "payment_method"})

    return OrderRequest(
        user_id=user_id,
        payment_method=payment_method,
        items=items,
        total=total,
    )
