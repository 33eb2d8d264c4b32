"""Read-only catalog access.

The checkout workflow never writes products; it only needs to look them
up. Listing filters mirror the storefront's search box.
"""

from .exceptions import InvalidArgument, NotFound
from .models import Product
from .parsing import to_decimal, to_positive_int

SORT_ORDERS = {
    "price_asc": ("price", "id"),
    "price_desc": ("-price", "id"),
    "rating_desc": ("-rating", "id"),
}


def get_product(product_id) -> Product:
    """Fetch a product by id.

    Raises:
        InvalidArgument: product_id is missing or not a positive integer
        NotFound: No product with that id
    """
    if product_id in (None, ""):
        raise InvalidArgument("product_id is required")

    product_pk = to_positive_int(product_id)
    if product_pk is None:
        raise InvalidArgument("product_id must be a positive integer")

    try:
        return Product.objects.get(pk=product_pk)
    except Product.DoesNotExist:
        raise NotFound(f"Product {product_id} not found")


def search_products(
    q: str = "",
    category: str = "",
    min_price=None,
    max_price=None,
    rating=None,
    sort: str = "",
):
    """Filter the catalog.

    Args:
        q: Case-insensitive substring of the product name
        category: Exact category
        min_price: Lower price bound (inclusive)
        max_price: Upper price bound (inclusive)
        rating: Minimum rating
        sort: price_asc, price_desc or rating_desc; id order otherwise

    Returns:
        QuerySet of Product. Unparseable numeric filters are ignored.
    """
    queryset = Product.objects.all()

    q = (q or "").strip()
    if q:
        queryset = queryset.filter(name__icontains=q)

    if category:
        queryset = queryset.filter(category=category)

    min_price = to_decimal(min_price)
    if min_price is not None:
        queryset = queryset.filter(price__gte=min_price)

    max_price = to_decimal(max_price)
    if max_price is not None:
        queryset = queryset.filter(price__lte=max_price)

    rating = to_decimal(rating)
    if rating is not None:
        queryset = queryset.filter(rating__gte=rating)

    return queryset.order_by(*SORT_ORDERS.get(sort, ("id",)))
