# Re-export the workflow entry points used by views
from .builder import LineItem, OrderRequest, build_order, normalize_payment_method
from .cart import add_or_increment, list_for_user, remove, set_quantity
from .orders import (
    CheckoutResult,
    CreatedOrder,
    OrderPage,
    cancel_order,
    create_order,
    get_order,
    list_orders,
    place_order,
)
from .settlement import settle_order
from .wallet import WalletDebit, debit, debit_if_applicable
