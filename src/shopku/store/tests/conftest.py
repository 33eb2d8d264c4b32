"""Shared pytest fixtures for shopku.store tests."""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.test import Client

User = get_user_model()


@pytest.fixture
def user(db):
    """Create a customer with 100,000 in the wallet."""
    return User.objects.create_user(
        username="budi",
        email="budi@example.com",
        password="testpass123",
        balance=Decimal("100000.00"),
    )


@pytest.fixture
def other_user(db):
    """Create a second customer."""
    return User.objects.create_user(
        username="siti",
        email="siti@example.com",
        password="testpass123",
        balance=Decimal("100000.00"),
    )


@pytest.fixture
def product(db):
    """Create a product priced 30,000."""
    from shopku.store.models import Product

    return Product.objects.create(
        name="Kaos Polos",
        category="fashion",
        price=Decimal("30000.00"),
        stock=10,
        rating=Decimal("4.50"),
    )


@pytest.fixture
def second_product(db):
    """Create a cheaper product in another category."""
    from shopku.store.models import Product

    return Product.objects.create(
        name="Tumbler Stainless",
        category="home",
        price=Decimal("12500.00"),
        stock=5,
        rating=Decimal("3.80"),
    )


@pytest.fixture
def items_payload(product):
    """One line: the 30,000 product, quantity 2 (total 60,000)."""
    return [
        {
            "product_id": product.pk,
            "quantity": 2,
            "price": 30000,
            "name": product.name,
        }
    ]


@pytest.fixture
def client(user):
    """Return a Django test client logged in as ``user``."""
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def anonymous_client():
    return Client()
