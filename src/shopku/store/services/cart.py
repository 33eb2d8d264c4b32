"""Cart service layer.

One CartLine per (user, product). Views call these functions instead of
touching CartLine directly.
"""

import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from ..catalog import get_product
from ..exceptions import InvalidArgument, NotFound, StorageError
from ..models import CartLine
from ..parsing import to_int, to_positive_int

logger = logging.getLogger(__name__)


def _require_user(user):
    if user is None or not getattr(user, "pk", None):
        raise InvalidArgument("user is required")


def _line_pk(line_id) -> int:
    if line_id in (None, ""):
        raise InvalidArgument("cart_id is required")
    line_pk = to_positive_int(line_id)
    if line_pk is None:
        raise InvalidArgument("cart_id must be a positive integer")
    return line_pk


def _increment(user, product, quantity: int) -> bool:
    """Add ``quantity`` to an existing line. Returns False if there is none."""
    updated = CartLine.objects.filter(user=user, product=product).update(
        quantity=F("quantity") + quantity,
        updated_at=timezone.now(),
    )
    return bool(updated)


def add_or_increment(user, product_id, quantity=1) -> tuple[CartLine, bool]:
    """Add a product to the user's cart, or bump its quantity if already there.

    Stock is not checked here; the catalog enforces it.

    Args:
        user: Cart owner
        product_id: Product to add
        quantity: Positive integer to add (default 1)

    Returns:
        Tuple of (CartLine with product loaded, created flag)

    Raises:
        InvalidArgument: Missing user/product or non-positive quantity
        NotFound: Product does not exist
        StorageError: Database failure
    """
    _require_user(user)
    if product_id in (None, ""):
        raise InvalidArgument("product_id is required")

    qty = to_positive_int(quantity)
    if qty is None:
        raise InvalidArgument("quantity must be a positive integer")

    product = get_product(product_id)

    created = False
    try:
        with transaction.atomic():
            if not _increment(user, product, qty):
                CartLine.objects.create(user=user, product=product, quantity=qty)
                created = True
    except IntegrityError:
        # A concurrent request inserted the line first; the unique
        # constraint guarantees there is exactly one row to bump.
        try:
            with transaction.atomic():
                bumped = _increment(user, product, qty)
        except DatabaseError as e:
            logger.exception("Cart retry failed for product %s", product.pk)
            raise StorageError("Could not update cart") from e
        if not bumped:
            # The conflicting line was removed again before the retry
            raise StorageError("Cart changed concurrently, please retry")
    except DatabaseError as e:
        logger.exception("Cart write failed for product %s", product.pk)
        raise StorageError("Could not update cart") from e

    try:
        line = CartLine.objects.select_related("product").get(user=user, product=product)
    except CartLine.DoesNotExist:
        raise StorageError("Cart changed concurrently, please retry")
    except DatabaseError as e:
        raise StorageError("Could not read cart") from e
    return line, created


def set_quantity(user, line_id, quantity) -> CartLine | None:
    """Overwrite a line's quantity, deleting the line when quantity <= 0.

    Returns:
        The updated CartLine, or None if the line was removed

    Raises:
        InvalidArgument: Missing line id or non-integer quantity
        NotFound: No such line in the user's cart
        StorageError: Database failure
    """
    _require_user(user)
    line_pk = _line_pk(line_id)

    qty = to_int(quantity)
    if qty is None:
        raise InvalidArgument("quantity must be an integer")

    if qty <= 0:
        remove(user, line_pk)
        return None

    lines = CartLine.objects.filter(pk=line_pk, user=user)
    try:
        updated = lines.update(quantity=qty, updated_at=timezone.now())
    except DatabaseError as e:
        raise StorageError("Could not update cart") from e

    if not updated:
        raise NotFound(f"Cart item {line_id} not found")
    return lines.select_related("product").get()


def remove(user, line_id) -> bool:
    """Delete a cart line. Removing a missing line is not an error.

    Returns:
        True if a line was deleted
    """
    _require_user(user)
    line_pk = _line_pk(line_id)

    try:
        deleted, _ = CartLine.objects.filter(pk=line_pk, user=user).delete()
    except DatabaseError as e:
        raise StorageError("Could not update cart") from e
    return deleted > 0


def list_for_user(user):
    """Get the user's cart lines with product data, most recently added first."""
    _require_user(user)
    return (
        CartLine.objects.filter(user=user)
        .select_related("product")
        .order_by("-created_at", "-id")
    )
