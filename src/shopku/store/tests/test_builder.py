"""Tests for checkout payload validation and totals."""

from decimal import Decimal

import pytest

from ..exceptions import InvalidPayload
from ..services.builder import (
    LineItem,
    build_order,
    normalize_payment_method,
    parse_line_item,
)


def _item(**overrides):
    item = {"product_id": 1, "quantity": 2, "price": 30000, "name": "Kaos Polos"}
    item.update(overrides)
    return item


class TestNormalizePaymentMethod:
    """Payment labels are uppercased with whitespace turned into underscores."""

    @pytest.mark.parametrize("raw,expected", [
        ("ShopKuPay", "SHOPKUPAY"),
        ("shopkupay", "SHOPKUPAY"),
        ("Virtual Account", "VIRTUAL_ACCOUNT"),
        ("  bank transfer  ", "BANK_TRANSFER"),
        ("e\twallet", "E_WALLET"),
        ("cash  on delivery", "CASH__ON_DELIVERY"),
    ])
    def test_normalizes_label(self, raw, expected):
        assert normalize_payment_method(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", 42, ["SHOPKUPAY"]])
    def test_missing_label_is_unselected(self, raw):
        assert normalize_payment_method(raw) == "UNSELECTED"


class TestParseLineItem:

    def test_accepts_numeric_strings(self):
        item = parse_line_item(_item(product_id="3", quantity="2", price="15000.50"))

        assert item == LineItem(product_id=3, quantity=2, price=Decimal("15000.50"), name="Kaos Polos")

    def test_accepts_largest_column_values(self):
        item = parse_line_item(_item(quantity=2147483647, price="999999999999.99"))

        assert item.quantity == 2147483647
        assert item.price == Decimal("999999999999.99")

    def test_accepts_whole_float_quantity(self):
        assert parse_line_item(_item(quantity=2.0)).quantity == 2

    def test_price_is_rounded_to_money_precision(self):
        """Banker's rounding keeps subtotals exact at two places."""
        assert parse_line_item(_item(price="10.005")).price == Decimal("10.00")
        assert parse_line_item(_item(price="10.015")).price == Decimal("10.02")

    @pytest.mark.parametrize("overrides", [
        {"product_id": None},
        {"product_id": 0},
        {"product_id": -4},
        {"product_id": "abc"},
        {"quantity": 0},
        {"quantity": -1},
        {"quantity": 1.5},
        {"quantity": True},
        {"price": 0},
        {"price": -100},
        {"price": "free"},
        {"price": "NaN"},
        {"price": "0.001"},
        {"name": ""},
        {"name": "   "},
        {"name": 123},
        {"name": "x" * 256},
        {"price": "1e30"},
        {"price": 1e30},
        {"price": "1000000000000.00"},
        {"price": "1e999999999"},
        {"quantity": 10**27},
        {"quantity": 2**31},
        {"quantity": "1e999999999"},
        {"product_id": 10**30},
    ])
    def test_rejects_malformed_entry(self, overrides):
        with pytest.raises(InvalidPayload):
            parse_line_item(_item(**overrides))

    def test_rejects_missing_field(self):
        raw = _item()
        del raw["name"]

        with pytest.raises(InvalidPayload):
            parse_line_item(raw)

    @pytest.mark.parametrize("raw", [None, "item", 7, [1, 2]])
    def test_rejects_non_object(self, raw):
        with pytest.raises(InvalidPayload):
            parse_line_item(raw)


class TestBuildOrder:

    def test_total_is_sum_of_subtotals(self):
        request = build_order(
            "user-1",
            "Bank Transfer",
            [
                _item(product_id=1, quantity=2, price="30000"),
                _item(product_id=2, quantity=3, price="12500.25", name="Tumbler"),
            ],
        )

        assert request.total == Decimal("97500.75")
        assert request.total == sum(item.price * item.quantity for item in request.items)
        assert request.payment_method == "BANK_TRANSFER"
        assert request.user_id == "user-1"
        assert request.pays_with_wallet is False

    def test_wallet_order_flagged(self):
        request = build_order("user-1", "shopkupay", [_item()])

        assert request.payment_method == "SHOPKUPAY"
        assert request.pays_with_wallet is True
        assert request.total == Decimal("60000.00")

    def test_missing_method_defaults_to_unselected(self):
        request = build_order("user-1", None, [_item()])

        assert request.payment_method == "UNSELECTED"

    @pytest.mark.parametrize("raw_items", [None, [], (), {}, "items", {"product_id": 1}])
    def test_rejects_empty_or_non_list_items(self, raw_items):
        with pytest.raises(InvalidPayload):
            build_order("user-1", "SHOPKUPAY", raw_items)

    def test_one_bad_entry_rejects_whole_order(self):
        """No partial acceptance."""
        with pytest.raises(InvalidPayload):
            build_order("user-1", None, [_item(), _item(quantity=0)])

    def test_wallet_label_configurable(self, settings):
        settings.SHOPKU = {**settings.SHOPKU, "WALLET_PAYMENT_METHOD": "DOMPET"}

        assert build_order("user-1", "dompet", [_item()]).pays_with_wallet is True
        assert build_order("user-1", "shopkupay", [_item()]).pays_with_wallet is False

    def test_rejects_total_beyond_amount_column(self):
        """Each line fits, but the order total would not."""
        items = [_item(quantity=1, price="999999999999.99"), _item(product_id=2, quantity=1, price="0.01")]

        with pytest.raises(InvalidPayload) as excinfo:
            build_order("user-1", None, items)

        assert excinfo.value.details == {"field": "total"}

    def test_rejects_total_beyond_decimal_precision(self):
        items = [_item(product_id=n, quantity=2147483647, price="999999999999.99") for n in range(1, 200)]

        with pytest.raises(InvalidPayload):
            build_order("user-1", None, items)

    def test_rejects_payment_label_longer_than_column(self):
        with pytest.raises(InvalidPayload) as excinfo:
            build_order("user-1", "x" * 51, [_item()])

        assert excinfo.value.details == {"field": "payment_method"}

    def test_accepts_payment_label_at_column_length(self):
        assert build_order("user-1", "x" * 50, [_item()]).payment_method == "X" * 50
