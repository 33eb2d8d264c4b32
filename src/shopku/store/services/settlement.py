"""Payment settlement: moving an order from pending to paid.

Settlement is idempotent. A paid order is returned unchanged, so a
retried request (for example after a client timeout) never debits the
wallet twice.
"""

import logging

from django.db import DatabaseError, transaction

from ..exceptions import Forbidden, InvalidArgument, InvalidOrderState, NotFound, SettlementFailed
from ..models import Order
from ..parsing import to_positive_int
from .wallet import debit_if_applicable

logger = logging.getLogger(__name__)

# Statuses that already imply payment
SETTLED_STATUSES = (Order.Status.PAID, Order.Status.SHIPPED, Order.Status.COMPLETED)


def settle_order(order_id, user) -> Order:
    """Mark an order as paid.

    Wallet orders are debited again at this point, against the current
    balance. Other payment methods are custodied externally, so no money
    moves here.

    Args:
        order_id: Order to settle
        user: Requesting user; must own the order

    Returns:
        The order, updated or (when already settled) unchanged

    Raises:
        NotFound: No such order
        Forbidden: Order belongs to another user
        InvalidOrderState: Order was cancelled
        InsufficientFunds: Wallet cannot cover the total
        SettlementFailed: Paid status could not be persisted; order stays pending
    """
    if user is None or not getattr(user, "pk", None):
        raise InvalidArgument("user is required")

    order_pk = to_positive_int(order_id)
    if order_pk is None:
        raise NotFound(f"Order {order_id} not found")

    try:
        with transaction.atomic():
            order = Order.objects.select_for_update().filter(pk=order_pk).first()
            if order is None:
                raise NotFound(f"Order {order_id} not found")
            if order.user_id != user.pk:
                logger.warning(
                    "Settlement refused: order %s requested by non-owner %s",
                    order.pk, user.pk,
                )
                raise Forbidden("Order belongs to another user")

            if order.status in SETTLED_STATUSES:
                logger.info("Order %s already settled, nothing to do", order.pk)
                return order
            if order.status == Order.Status.CANCELLED:
                raise InvalidOrderState("Cannot pay a cancelled order")

            debit_if_applicable(order.user_id, order.payment_method, order.total)

            order.status = Order.Status.PAID
            order.save(update_fields=["status", "updated_at"])
    except DatabaseError as e:
        logger.exception("Settlement of order %s failed", order_pk)
        raise SettlementFailed("Could not mark order as paid") from e

    logger.info(
        "Order settled",
        extra={"order_id": order.pk, "payment_method": order.payment_method, "total": str(order.total)},
    )
    return order
