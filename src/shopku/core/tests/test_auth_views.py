"""Tests for the account API: registration, token login and wallet balance."""

import json
from decimal import Decimal

import pytest
from django.contrib.auth import authenticate, get_user_model
from django.test import Client
from django.urls import reverse

User = get_user_model()


@pytest.fixture
def client():
    """Return a Django test client."""
    return Client()


@pytest.fixture
def customer(db):
    """Create a customer with some wallet balance."""
    return User.objects.create_user(
        username="budi",
        email="budi@example.com",
        password="testpass123",
        first_name="Budi",
        last_name="Santoso",
        balance=Decimal("75000.00"),
    )


def _post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


@pytest.mark.django_db
class TestRegisterView:

    def test_register_creates_user_with_empty_wallet(self, client):
        response = _post_json(client, reverse("core:register"), {"username": "siti", "password": "s3cret-pass"})

        assert response.status_code == 201
        user = User.objects.get(username="siti")
        assert user.balance == Decimal("0.00")
        assert user.check_password("s3cret-pass")

    def test_duplicate_username(self, client, customer):
        response = _post_json(client, reverse("core:register"), {"username": "budi", "password": "x"})

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.parametrize("payload", [{}, {"username": "siti"}, {"password": "x"}, {"username": "  ", "password": "x"}])
    def test_missing_fields(self, client, payload):
        response = _post_json(client, reverse("core:register"), payload)

        assert response.status_code == 400

    def test_invalid_json(self, client):
        response = client.post(reverse("core:register"), data="nope", content_type="application/json")

        assert response.status_code == 400


@pytest.mark.django_db
class TestTokenLoginView:

    def test_login_returns_token(self, client, customer):
        from rest_framework.authtoken.models import Token

        response = _post_json(client, reverse("core:token"), {"username": "budi", "password": "testpass123"})

        assert response.status_code == 200
        body = response.json()
        assert body["token"] == Token.objects.get(user=customer).key
        assert body["user"]["username"] == "budi"

    def test_login_is_stable_across_calls(self, client, customer):
        url = reverse("core:token")
        payload = {"username": "budi", "password": "testpass123"}

        assert _post_json(client, url, payload).json()["token"] == _post_json(client, url, payload).json()["token"]

    def test_login_with_email(self, client, customer):
        response = _post_json(client, reverse("core:token"), {"username": "BUDI@example.com", "password": "testpass123"})

        assert response.status_code == 200

    def test_wrong_password(self, client, customer):
        response = _post_json(client, reverse("core:token"), {"username": "budi", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_missing_credentials(self, client):
        response = _post_json(client, reverse("core:token"), {"username": "budi"})

        assert response.status_code == 400


@pytest.mark.django_db
class TestMeView:

    def test_returns_balance(self, client, customer):
        from rest_framework.authtoken.models import Token

        token = Token.objects.create(user=customer)
        response = client.get(reverse("core:me"), HTTP_AUTHORIZATION=f"Bearer {token.key}")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "username": "budi",
            "display_name": "Budi Santoso",
            "balance": "75000.00",
        }

    def test_requires_authentication(self, client):
        assert client.get(reverse("core:me")).status_code == 401


@pytest.mark.django_db
class TestProfileView:

    @pytest.fixture
    def auth(self, customer):
        from rest_framework.authtoken.models import Token

        token = Token.objects.create(user=customer)
        return {"HTTP_AUTHORIZATION": f"Bearer {token.key}"}

    def _put(self, client, payload, auth):
        return client.put(
            reverse("core:profile"),
            data=json.dumps(payload),
            content_type="application/json",
            **auth,
        )

    def test_returns_profile(self, client, customer, auth):
        customer.phone = "081234567890"
        customer.save(update_fields=["phone"])

        data = client.get(reverse("core:profile"), **auth).json()["data"]

        assert data["username"] == "budi"
        assert data["email"] == "budi@example.com"
        assert data["phone"] == "081234567890"
        assert data["address"] == ""
        assert data["avatar_url"] == ""
        assert "balance" not in data

    def test_updates_only_supplied_fields(self, client, customer, auth):
        response = self._put(client, {"address": "  Jl. Merdeka 1, Bandung "}, auth)

        assert response.status_code == 200
        assert response.json()["message"] == "Profile updated successfully"
        customer.refresh_from_db()
        assert customer.address == "Jl. Merdeka 1, Bandung"
        assert customer.email == "budi@example.com"
        assert customer.username == "budi"
        assert customer.balance == Decimal("75000.00")

    def test_balance_cannot_be_changed(self, client, customer, auth):
        self._put(client, {"balance": "999999.00", "phone": "0811"}, auth)

        customer.refresh_from_db()
        assert customer.balance == Decimal("75000.00")
        assert customer.phone == "0811"

    def test_rename(self, client, customer, auth):
        response = self._put(client, {"username": "budi_s"}, auth)

        assert response.json()["data"]["username"] == "budi_s"
        assert authenticate(username="budi_s", password="testpass123") is not None

    def test_username_taken(self, client, customer, auth):
        User.objects.create_user(username="siti", password="testpass123")

        response = self._put(client, {"username": "siti"}, auth)

        assert response.status_code == 409
        customer.refresh_from_db()
        assert customer.username == "budi"

    @pytest.mark.parametrize("payload", [
        {"email": "not-an-email"},
        {"phone": "0" * 33},
        {"avatar_url": "not a url"},
        {"username": "   "},
        {"phone": 812345},
    ])
    def test_invalid_fields_rejected(self, client, customer, auth, payload):
        response = self._put(client, payload, auth)

        assert response.status_code == 400
        assert response.json()["success"] is False
        customer.refresh_from_db()
        assert customer.phone == ""
        assert customer.email == "budi@example.com"

    def test_requires_authentication(self, client):
        assert client.get(reverse("core:profile")).status_code == 401
        assert client.put(reverse("core:profile"), data="{}", content_type="application/json").status_code == 401


@pytest.mark.django_db
class TestUsernameOrEmailBackend:

    def test_inactive_user_cannot_authenticate(self, customer):
        User.objects.filter(pk=customer.pk).update(is_active=False)

        assert authenticate(username="budi", password="testpass123") is None

    def test_ambiguous_email_is_rejected(self, customer):
        User.objects.create_user(username="budi2", email="budi@example.com", password="testpass123")

        assert authenticate(username="budi@example.com", password="testpass123") is None


@pytest.mark.django_db
def test_health_check(client):
    response = client.get(reverse("health_check"))

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
