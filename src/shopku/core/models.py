"""Core models for ShopKu."""

import uuid
from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Shop customer account.

    ``balance`` is the ShopKu Pay wallet. It is only ever decremented through
    ``shopku.store.services.wallet`` and the database refuses negative values.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    phone = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)
    avatar_url = models.URLField(max_length=500, blank=True)

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(balance__gte=0),
                name="core_user_balance_non_negative",
            ),
        ]

    def __str__(self):
        return self.username

    def get_display_name(self):
        """Get display name for the user."""
        if self.first_name or self.last_name:
            return f"{self.first_name} {self.last_name}".strip()
        return self.username
