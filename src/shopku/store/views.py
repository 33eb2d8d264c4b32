"""Store API views.

These endpoints back the storefront:
- Catalog browsing and filtering
- Per-user cart
- Checkout, order history and payment settlement

Every response is ``{"success": ..., ...}``; failures carry a stable
``error`` kind and a human-readable ``message``.
"""

import json
import logging
from functools import wraps

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from shopku.core.auth import require_api_user

from . import services
from .catalog import get_product, search_products
from .exceptions import InvalidArgument, InvalidPayload, StoreError

logger = logging.getLogger(__name__)


def handle_store_errors(view_func):
    """Decorator translating StoreError into a JSON error response."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except StoreError as e:
            if e.status_code >= 500:
                logger.error("%s on %s %s: %s", e.kind, request.method, request.path, e.message)
            return JsonResponse(e.as_dict(), status=e.status_code)
    return wrapper


def _read_json(request, error_class=InvalidArgument):
    try:
        data = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise error_class("Invalid JSON body")
    if not isinstance(data, dict):
        raise error_class("Invalid JSON body")
    return data


def _product_data(product):
    return {
        "id": product.pk,
        "name": product.name,
        "description": product.description,
        "category": product.category,
        "price": product.price,
        "stock": product.stock,
        "rating": product.rating,
        "image_url": product.image_url,
    }


def _cart_line_data(line):
    return {
        "id": line.pk,
        "product_id": line.product_id,
        "quantity": line.quantity,
        "created_at": line.created_at.isoformat(),
        "product": _product_data(line.product),
    }


def _order_item_data(item):
    return {
        "id": item.pk,
        "product_id": item.product_id,
        "quantity": item.quantity,
        "price_at_purchase": item.price_at_purchase,
        "name_snapshot": item.name_snapshot,
    }


def _order_data(order, items=None):
    if items is None:
        items = order.items.all()
    return {
        "id": order.pk,
        "user_id": str(order.user_id),
        "payment_method": order.payment_method,
        "status": order.status,
        "total": order.total,
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "items": [_order_item_data(item) for item in items],
    }


class ProductListView(View):
    """List catalog products.

    GET /api/products/?q=&category=&min=&max=&rating=&sort=
    """

    def get(self, request):
        params = request.GET
        products = search_products(
            q=params.get("q", ""),
            category=params.get("category", ""),
            min_price=params.get("min"),
            max_price=params.get("max"),
            rating=params.get("rating"),
            sort=params.get("sort", ""),
        )
        return JsonResponse({"success": True, "data": [_product_data(p) for p in products]})


class ProductDetailView(View):
    """GET /api/products/<product_id>/"""

    @method_decorator(handle_store_errors)
    def get(self, request, product_id):
        return JsonResponse({"success": True, "data": _product_data(get_product(product_id))})


@method_decorator(csrf_exempt, name="dispatch")
class CartView(View):
    """Shopping cart of the authenticated user.

    GET    /api/cart/
    POST   /api/cart/      {"product_id": 3, "quantity": 2}
    PUT    /api/cart/      {"cart_id": 7, "quantity": 5}
    DELETE /api/cart/?cart_id=7
    Headers: Authorization: Bearer <token>
    """

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def get(self, request):
        lines = services.list_for_user(request.user)
        return JsonResponse({"success": True, "data": [_cart_line_data(line) for line in lines]})

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def post(self, request):
        data = _read_json(request)
        if not data.get("product_id"):
            raise InvalidArgument("product_id is required")

        line, created = services.add_or_increment(
            request.user,
            data["product_id"],
            data.get("quantity", 1),
        )
        return JsonResponse(
            {
                "success": True,
                "data": _cart_line_data(line),
                "message": "Added to cart" if created else "Quantity updated",
            },
            status=201 if created else 200,
        )

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def put(self, request):
        data = _read_json(request)
        if not data.get("cart_id") or data.get("quantity") is None:
            raise InvalidArgument("cart_id and quantity are required")

        line = services.set_quantity(request.user, data["cart_id"], data["quantity"])
        if line is None:
            return JsonResponse({"success": True, "message": "Item removed from cart"})
        return JsonResponse({"success": True, "data": _cart_line_data(line), "message": "Quantity updated"})

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def delete(self, request):
        cart_id = request.GET.get("cart_id")
        if not cart_id:
            raise InvalidArgument("cart_id is required")

        services.remove(request.user, cart_id)
        return JsonResponse({"success": True, "message": "Item removed from cart"})


@method_decorator(csrf_exempt, name="dispatch")
class OrderListView(View):
    """Checkout and order history.

    GET  /api/orders/?limit=20&offset=0
    POST /api/orders/
    Headers: Authorization: Bearer <token>
    {
        "payment_method": "ShopKu Pay",
        "items": [
            {"product_id": 1, "quantity": 2, "price": 30000, "name": "Kaos Polos"}
        ]
    }
    """

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def get(self, request):
        page = services.list_orders(
            request.user,
            limit=request.GET.get("limit"),
            offset=request.GET.get("offset"),
        )
        return JsonResponse({
            "success": True,
            "data": [_order_data(order) for order in page.orders],
            "count": page.count,
            "limit": page.limit,
            "offset": page.offset,
        })

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def post(self, request):
        data = _read_json(request, error_class=InvalidPayload)
        result = services.place_order(
            request.user,
            data.get("payment_method"),
            data.get("items"),
        )

        response = {"success": True, "data": _order_data(result.order, result.items)}
        if result.wallet.applied:
            response["balance"] = result.wallet.balance
        return JsonResponse(response, status=201)


class OrderDetailView(View):
    """GET /api/orders/<order_id>/ (only the owner's orders are visible)"""

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def get(self, request, order_id):
        order = services.get_order(order_id, user=request.user)
        return JsonResponse({"success": True, "data": _order_data(order)})


@method_decorator(csrf_exempt, name="dispatch")
class OrderPayView(View):
    """Settle an order.

    POST /api/orders/<order_id>/pay/
    Headers: Authorization: Bearer <token>

    Repeating the call on a paid order returns it unchanged.
    """

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def post(self, request, order_id):
        services.settle_order(order_id, request.user)
        order = services.get_order(order_id, user=request.user)
        return JsonResponse({"success": True, "data": _order_data(order)})


@method_decorator(csrf_exempt, name="dispatch")
class OrderCancelView(View):
    """POST /api/orders/<order_id>/cancel/"""

    @method_decorator(require_api_user)
    @method_decorator(handle_store_errors)
    def post(self, request, order_id):
        services.cancel_order(order_id, request.user)
        order = services.get_order(order_id, user=request.user)
        return JsonResponse({"success": True, "data": _order_data(order)})
