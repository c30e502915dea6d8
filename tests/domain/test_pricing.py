"""Unit tests for the Pricing Calculator domain service."""

from decimal import Decimal

import pytest

from rxdraft.domain.exceptions import ValidationError
from rxdraft.domain.model.line_item import LineItem
from rxdraft.domain.service.pricing import PricingPolicy, calculate_pricing
from tests.fakes import make_medicine


def _item(price: str, qty: int = 1, medicine_id: int = 5) -> LineItem:
    return LineItem.for_medicine(make_medicine(id=medicine_id, price=price), quantity=qty)


class TestPrescriptionPolicy:

    def test_total_equals_subtotal(self):
        items = [_item("10.00", 2), _item("2.50", 4)]
        p = calculate_pricing(items, PricingPolicy.prescription())
        assert p.subtotal == Decimal("30.00")
        assert p.total == Decimal("30.00")
        assert p.tax is None
        assert p.discount is None
        assert p.change is None

    def test_unselected_rows_contribute_zero(self):
        items = [LineItem.blank(), _item("10.00", 2)]
        p = calculate_pricing(items, PricingPolicy.prescription())
        assert p.subtotal == Decimal("20.00")
        assert p.item_count == 1
        assert p.unit_count == 2

    def test_empty_draft(self):
        p = calculate_pricing([], PricingPolicy.prescription())
        assert p.subtotal == Decimal("0.00")
        assert p.total == Decimal("0.00")

    def test_idempotent(self):
        items = [_item("3.33", 3), _item("0.10", 7)]
        policy = PricingPolicy.point_of_sale()
        first = calculate_pricing(items, policy, Decimal("1"), Decimal("50"))
        second = calculate_pricing(items, policy, Decimal("1"), Decimal("50"))
        assert first == second

    def test_does_not_mutate_items(self):
        items = [_item("10.00", 2)]
        before = [(i.quantity, i.total_price) for i in items]
        calculate_pricing(items, PricingPolicy.point_of_sale(), Decimal("5"), Decimal("100"))
        assert [(i.quantity, i.total_price) for i in items] == before


class TestPointOfSalePolicy:

    def _hundred(self):
        return [_item("100.00", 1)]

    def test_tax_discount_and_change(self):
        p = calculate_pricing(
            self._hundred(), PricingPolicy.point_of_sale(Decimal("0.10")),
            discount=Decimal("5.00"), received=Decimal("110.00"),
        )
        assert p.subtotal == Decimal("100.00")
        assert p.tax == Decimal("10.00")
        assert p.discount == Decimal("5.00")
        assert p.total == Decimal("105.00")
        assert p.change == Decimal("5.00")
        assert not p.is_underpaid

    def test_insufficient_payment_gives_negative_change(self):
        p = calculate_pricing(
            self._hundred(), PricingPolicy.point_of_sale(Decimal("0.10")),
            discount=Decimal("5.00"), received=Decimal("50.00"),
        )
        assert p.change == Decimal("-55.00")
        assert p.is_underpaid

    def test_no_received_means_no_change(self):
        p = calculate_pricing(self._hundred(), PricingPolicy.point_of_sale())
        assert p.received is None
        assert p.change is None
        assert p.discount == Decimal("0.00")
        assert p.total == Decimal("110.00")

    def test_tax_is_rounded_half_up(self):
        p = calculate_pricing([_item("0.05", 1)], PricingPolicy.point_of_sale(Decimal("0.10")))
        assert p.tax == Decimal("0.01")

    def test_line_discounts_reduce_subtotal(self):
        item = _item("10.00", 3)
        item.change_discount(item.unit_price)
        p = calculate_pricing([item], PricingPolicy.point_of_sale(Decimal("0")))
        assert p.subtotal == Decimal("20.00")

    def test_negative_discount_rejected(self):
        with pytest.raises(ValidationError, match="Discount cannot be negative"):
            calculate_pricing(self._hundred(), PricingPolicy.point_of_sale(), Decimal("-1"))

    def test_negative_tax_rate_rejected(self):
        with pytest.raises(ValidationError, match="Tax rate"):
            PricingPolicy.point_of_sale(Decimal("-0.1"))
