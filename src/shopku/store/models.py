"""Store models: catalog, cart and orders."""

from decimal import Decimal

from django.conf import settings
from django.db import models


class Product(models.Model):
    """Catalog product. Read-only from the checkout workflow's point of view."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True, db_index=True)
    price = models.DecimalField(max_digits=14, decimal_places=2)
    stock = models.PositiveIntegerField(default=0)
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal("0.00"))
    image_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="store_product_price_positive",
            ),
        ]

    def __str__(self):
        return self.name


class CartLine(models.Model):
    """One product in a user's cart, with a positive quantity."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart_lines",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="cart_lines",
    )
    quantity = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "product"],
                name="store_cartline_unique_user_product",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="store_cartline_quantity_positive",
            ),
        ]

    def __str__(self):
        return f"{self.user} x{self.quantity} {self.product_id}"


class Order(models.Model):
    """A checkout's durable record.

    Only ``status`` and ``updated_at`` change after creation.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        SHIPPED = "shipped", "Shipped"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    payment_method = models.CharField(max_length=50, default="UNSELECTED")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    total = models.DecimalField(max_digits=14, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="store_order_user_created_idx"),
        ]

    def __str__(self):
        return f"Order #{self.pk} ({self.status})"


class OrderItem(models.Model):
    """Immutable order line with price and name snapshots.

    ``product_id`` is a plain reference so later catalog edits or deletions
    never touch historical orders.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product_id = models.PositiveBigIntegerField()
    quantity = models.PositiveIntegerField()
    price_at_purchase = models.DecimalField(max_digits=14, decimal_places=2)
    name_snapshot = models.CharField(max_length=255)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name_snapshot} x{self.quantity}"

    @property
    def subtotal(self):
        return self.price_at_purchase * self.quantity
