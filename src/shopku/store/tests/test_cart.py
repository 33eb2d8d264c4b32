"""Tests for the cart service."""

from unittest.mock import patch

import pytest

from ..exceptions import InvalidArgument, NotFound, StorageError
from ..models import CartLine
from ..services import cart as cart_services
from ..services.cart import add_or_increment, list_for_user, remove, set_quantity


@pytest.mark.django_db
class TestAddOrIncrement:

    def test_adding_same_product_twice_increments(self, user, product):
        """Quantities 2 then 3 give one line of 5, not two rows."""
        first, created_first = add_or_increment(user, product.pk, 2)
        second, created_second = add_or_increment(user, product.pk, 3)

        assert created_first is True
        assert created_second is False
        assert first.pk == second.pk
        assert second.quantity == 5
        assert CartLine.objects.filter(user=user, product=product).count() == 1

    def test_default_quantity_is_one(self, user, product):
        line, _ = add_or_increment(user, product.pk)

        assert line.quantity == 1
        assert line.product == product

    def test_carts_are_per_user(self, user, other_user, product):
        add_or_increment(user, product.pk, 2)
        add_or_increment(other_user, product.pk, 1)

        assert CartLine.objects.get(user=user).quantity == 2
        assert CartLine.objects.get(user=other_user).quantity == 1

    @pytest.mark.parametrize("quantity", [0, -1, "two", 1.5, None])
    def test_rejects_invalid_quantity(self, user, product, quantity):
        with pytest.raises(InvalidArgument):
            add_or_increment(user, product.pk, quantity)

        assert not CartLine.objects.exists()

    @pytest.mark.parametrize("product_id", [None, True, False, "abc", 0, -2, 1.5])
    def test_requires_valid_product_id(self, user, product, product_id):
        with pytest.raises(InvalidArgument):
            add_or_increment(user, product_id)

        assert not CartLine.objects.exists()

    def test_requires_user(self, product):
        with pytest.raises(InvalidArgument):
            add_or_increment(None, product.pk)

    def test_unknown_product(self, user):
        with pytest.raises(NotFound):
            add_or_increment(user, 999999)

    def test_concurrent_first_insert_falls_back_to_increment(self, user, product):
        """If another request creates the line between our update and insert,
        the unique constraint turns the insert into an increment."""
        add_or_increment(user, product.pk, 2)
        real_increment = cart_services._increment
        calls = []

        def racing_increment(*args):
            calls.append(args)
            if len(calls) == 1:
                return False  # stale view: line not there yet
            return real_increment(*args)

        with patch.object(cart_services, "_increment", side_effect=racing_increment):
            line, created = add_or_increment(user, product.pk, 3)

        assert created is False
        assert line.quantity == 5
        assert len(calls) == 2
        assert CartLine.objects.filter(user=user).count() == 1

    def test_line_vanishing_before_retry_is_a_storage_error(self, user, product):
        """The insert conflicts, then the retry finds nothing to bump."""
        add_or_increment(user, product.pk, 2)

        with patch.object(cart_services, "_increment", return_value=False):
            with pytest.raises(StorageError):
                add_or_increment(user, product.pk, 3)

        assert CartLine.objects.get(user=user).quantity == 2

    def test_line_vanishing_before_read_is_a_storage_error(self, user, product):
        with patch.object(CartLine.objects, "select_related") as select_related:
            select_related.return_value.get.side_effect = CartLine.DoesNotExist
            with pytest.raises(StorageError):
                add_or_increment(user, product.pk, 1)


@pytest.mark.django_db
class TestSetQuantity:

    def test_overwrites_quantity(self, user, product):
        line, _ = add_or_increment(user, product.pk, 2)

        updated = set_quantity(user, line.pk, 7)

        assert updated.pk == line.pk
        assert updated.quantity == 7

    @pytest.mark.parametrize("quantity", [0, -3, "0"])
    def test_non_positive_quantity_deletes_line(self, user, product, quantity):
        line, _ = add_or_increment(user, product.pk, 2)

        assert set_quantity(user, line.pk, quantity) is None
        assert not CartLine.objects.filter(pk=line.pk).exists()

    def test_unknown_line(self, user):
        with pytest.raises(NotFound):
            set_quantity(user, 424242, 3)

    def test_other_users_line_is_not_visible(self, user, other_user, product):
        line, _ = add_or_increment(other_user, product.pk, 2)

        with pytest.raises(NotFound):
            set_quantity(user, line.pk, 9)

        line.refresh_from_db()
        assert line.quantity == 2

    @pytest.mark.parametrize("line_id,quantity", [(None, 1), ("", 1), ("abc", 1), (1, "many")])
    def test_rejects_invalid_arguments(self, user, line_id, quantity):
        with pytest.raises(InvalidArgument):
            set_quantity(user, line_id, quantity)


@pytest.mark.django_db
class TestRemove:

    def test_remove_is_idempotent(self, user, product):
        line, _ = add_or_increment(user, product.pk)

        assert remove(user, line.pk) is True
        assert remove(user, line.pk) is False
        assert not CartLine.objects.exists()

    def test_cannot_remove_other_users_line(self, user, other_user, product):
        line, _ = add_or_increment(other_user, product.pk)

        assert remove(user, line.pk) is False
        assert CartLine.objects.filter(pk=line.pk).exists()

    def test_requires_line_id(self, user):
        with pytest.raises(InvalidArgument):
            remove(user, None)


@pytest.mark.django_db
class TestListForUser:

    def test_newest_first_with_product_data(self, user, other_user, product, second_product):
        add_or_increment(user, product.pk, 1)
        add_or_increment(user, second_product.pk, 4)
        add_or_increment(other_user, product.pk, 1)

        lines = list(list_for_user(user))

        assert [line.product.name for line in lines] == ["Tumbler Stainless", "Kaos Polos"]
        assert lines[0].quantity == 4

    def test_empty_cart(self, user):
        assert list(list_for_user(user)) == []
