"""Order service layer.

Checkout runs Builder -> Wallet -> Order Store inside one transaction, so
a failure after the wallet debit rolls the debit back as well. The order
store also deletes a header whose lines failed to insert, which keeps
creation all-or-nothing when it is called outside a transaction.
"""

import logging
from decimal import Decimal
from typing import NamedTuple

from django.db import DatabaseError, transaction

from ..conf import get_setting
from ..exceptions import (
    Forbidden,
    InvalidArgument,
    InvalidOrderState,
    ItemPersistenceError,
    NotFound,
    StorageError,
)
from ..models import Order, OrderItem
from ..parsing import to_int, to_positive_int
from .builder import LineItem, build_order
from .wallet import WalletDebit, debit_if_applicable

logger = logging.getLogger(__name__)


class CreatedOrder(NamedTuple):
    order: Order
    items: list[OrderItem]


class CheckoutResult(NamedTuple):
    order: Order
    items: list[OrderItem]
    wallet: WalletDebit


class OrderPage(NamedTuple):
    orders: list[Order]
    count: int
    limit: int
    offset: int


def _discard_order(order_pk) -> bool:
    """Delete an order header whose lines were never written.

    Safe to repeat; retried up to COMPENSATION_RETRIES times.
    """
    attempts = max(1, get_setting("COMPENSATION_RETRIES", 3))
    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                Order.objects.filter(pk=order_pk).delete()
        except DatabaseError:
            logger.exception(
                "Compensating delete failed for order %s (attempt %d/%d)",
                order_pk, attempt, attempts,
            )
            continue
        logger.warning("Discarded order %s after line insert failure", order_pk)
        return True

    logger.error("Order %s could not be discarded; header may be orphaned", order_pk)
    return False


def create_order(
    user_id,
    payment_method: str,
    total: Decimal,
    initial_status: str,
    items: list[LineItem],
) -> CreatedOrder:
    """Persist an order header and its snapshot lines.

    Args:
        user_id: Owning user
        payment_method: Normalized payment method
        total: Order total (sum of line subtotals)
        initial_status: ``paid`` when the wallet was already debited, else ``pending``
        items: Validated line items

    Returns:
        CreatedOrder with the saved order and its lines

    Raises:
        StorageError: Header insert failed
        ItemPersistenceError: Line insert failed; the header was deleted
    """
    if initial_status not in (Order.Status.PENDING, Order.Status.PAID):
        raise InvalidArgument(f"Orders cannot be created as {initial_status}")

    try:
        with transaction.atomic():
            order = Order.objects.create(
                user_id=user_id,
                payment_method=payment_method,
                status=initial_status,
                total=total,
            )
    except DatabaseError as e:
        logger.exception("Order insert failed for user %s", user_id)
        raise StorageError("Could not create order") from e

    try:
        with transaction.atomic():
            lines = OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price_at_purchase=item.price,
                    name_snapshot=item.name,
                )
                for item in items
            ])
    except DatabaseError as e:
        logger.error("Line insert failed for order %s: %s", order.pk, e)
        _discard_order(order.pk)
        raise ItemPersistenceError(
            "Could not save order items",
            {"order_id": order.pk},
        ) from e

    return CreatedOrder(order=order, items=lines)


def place_order(user, payment_method_raw, raw_items) -> CheckoutResult:
    """Check out: validate, pay from the wallet if chosen, persist the order.

    Args:
        user: Authenticated customer
        payment_method_raw: Payment label from the client
        raw_items: Line payload from the client

    Returns:
        CheckoutResult with the order (``paid`` for wallet orders, otherwise
        ``pending``), its lines, and the wallet outcome

    Raises:
        InvalidArgument: No user
        InvalidPayload: Malformed items
        NotFound: User row vanished
        InsufficientFunds: Wallet cannot cover the total
        StorageError / ItemPersistenceError: Database failure
    """
    if user is None or not getattr(user, "pk", None):
        raise InvalidArgument("user is required")

    request = build_order(user.pk, payment_method_raw, raw_items)

    try:
        with transaction.atomic():
            wallet = debit_if_applicable(request.user_id, request.payment_method, request.total)
            status = Order.Status.PAID if wallet.applied else Order.Status.PENDING
            created = create_order(
                request.user_id,
                request.payment_method,
                request.total,
                status,
                request.items,
            )
    except DatabaseError as e:
        logger.exception("Checkout transaction failed for user %s", user.pk)
        raise StorageError("Could not create order") from e

    logger.info(
        "Order placed",
        extra={
            "order_id": created.order.pk,
            "user_id": str(user.pk),
            "payment_method": request.payment_method,
            "status": status,
            "total": str(request.total),
        },
    )
    return CheckoutResult(order=created.order, items=created.items, wallet=wallet)


def _order_pk(order_id) -> int:
    order_pk = to_positive_int(order_id)
    if order_pk is None:
        raise NotFound(f"Order {order_id} not found")
    return order_pk


def get_order(order_id, user=None) -> Order:
    """Fetch an order with its lines.

    When ``user`` is given, orders owned by someone else are reported as
    missing rather than forbidden.

    Raises:
        NotFound: No such order (or not the user's)
    """
    queryset = Order.objects.prefetch_related("items")
    if user is not None:
        queryset = queryset.filter(user=user)

    order = queryset.filter(pk=_order_pk(order_id)).first()
    if order is None:
        raise NotFound(f"Order {order_id} not found")
    return order


def list_orders(user, limit=None, offset=None) -> OrderPage:
    """Get a page of the user's orders, newest first.

    ``limit`` is clamped to 1..ORDER_PAGE_MAX and ``offset`` to >= 0;
    missing or non-integer values fall back to the defaults.
    """
    if user is None or not getattr(user, "pk", None):
        raise InvalidArgument("user is required")

    max_limit = get_setting("ORDER_PAGE_MAX", 200)
    limit = to_int(limit)
    if limit is None:
        limit = get_setting("ORDER_PAGE_DEFAULT", 50)
    limit = min(max(limit, 1), max_limit)

    offset = to_int(offset)
    offset = max(offset or 0, 0)

    queryset = Order.objects.filter(user=user).order_by("-created_at", "-id")
    orders = list(queryset.prefetch_related("items")[offset:offset + limit])
    return OrderPage(orders=orders, count=queryset.count(), limit=limit, offset=offset)


def cancel_order(order_id, user) -> Order:
    """Cancel a pending order.

    Cancelling an already-cancelled order is a no-op.

    Raises:
        NotFound: No such order
        Forbidden: Order belongs to another user
        InvalidOrderState: Order is already paid, shipped or completed
        StorageError: Database failure
    """
    if user is None or not getattr(user, "pk", None):
        raise InvalidArgument("user is required")

    order_pk = _order_pk(order_id)
    try:
        with transaction.atomic():
            order = Order.objects.select_for_update().filter(pk=order_pk).first()
            if order is None:
                raise NotFound(f"Order {order_id} not found")
            if order.user_id != user.pk:
                raise Forbidden("Order belongs to another user")

            if order.status == Order.Status.CANCELLED:
                return order
            if order.status != Order.Status.PENDING:
                raise InvalidOrderState(f"Cannot cancel a {order.status} order")

            order.status = Order.Status.CANCELLED
            order.save(update_fields=["status", "updated_at"])
    except DatabaseError as e:
        logger.exception("Cancelling order %s failed", order_pk)
        raise StorageError("Could not cancel order") from e

    logger.info("Order cancelled", extra={"order_id": order.pk, "user_id": str(user.pk)})
    return order
