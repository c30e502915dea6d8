"""Unit tests for the LineItem entity and its total-price invariant."""

from decimal import Decimal

import pytest

from rxdraft.domain.exceptions import ValidationError
from rxdraft.domain.model.line_item import UNSELECTED, LineItem
from rxdraft.domain.model.value_objects import Money, money2
from tests.fakes import make_medicine


def _assert_total_invariant(item: LineItem) -> None:
    expected = money2(item.quantity * item.unit_price.amount - item.line_discount.amount)
    assert item.total_price.amount == expected


class TestBlankItem:

    def test_blank_is_unselected_placeholder(self):
        item = LineItem.blank()
        assert item.medicine_id == UNSELECTED
        assert item.quantity == 1
        assert item.total_price == Money.zero()
        assert not item.is_selected
        assert not item.is_persisted


class TestBinding:

    def test_bind_copies_catalog_fields(self):
        item = LineItem.blank()
        item.bind(make_medicine(id=7, name="Amoxicillin", price="12.50", form="Capsule"))
        assert item.medicine_id == 7
        assert item.medicine_name == "Amoxicillin"
        assert item.dosage_form == "Capsule"
        assert item.unit_price == Money.of("12.50")
        assert item.total_price == Money.of("12.50")

    def test_bind_keeps_quantity(self):
        item = LineItem(quantity=3)
        item.bind(make_medicine(price="2.00"))
        assert item.total_price == Money.of("6.00")

    def test_unbind_resets_to_sentinel(self):
        item = LineItem.for_medicine(make_medicine(), quantity=2)
        item.unbind()
        assert item.medicine_id == UNSELECTED
        assert item.total_price.is_zero
        assert item.medicine_name == ""


class TestTotalInvariant:

    @pytest.mark.parametrize("qty,price", [(1, "0.10"), (3, "0.333"), (7, "19.99"), (250, "1.005")])
    def test_holds_after_quantity_and_price_changes(self, qty, price):
        item = LineItem.for_medicine(make_medicine(price="1.00"))
        item.change_quantity(qty)
        _assert_total_invariant(item)
        item.change_unit_price(Money.of(price))
        _assert_total_invariant(item)

    def test_holds_with_line_discount(self):
        item = LineItem.for_medicine(make_medicine(price="10.00"), quantity=3)
        item.change_discount(Money.of("4.50"))
        assert item.total_price == Money.of("25.50")
        _assert_total_invariant(item)

    def test_zero_quantity_rejected(self):
        item = LineItem.for_medicine(make_medicine())
        with pytest.raises(ValidationError, match="must be positive"):
            item.change_quantity(0)
        assert item.quantity == 1

    def test_zero_price_rejected(self):
        item = LineItem.for_medicine(make_medicine(price="5.00"))
        with pytest.raises(ValidationError, match="greater than 0"):
            item.change_unit_price(Money.zero())
        assert item.unit_price == Money.of("5.00")

    def test_discount_above_gross_rejected(self):
        item = LineItem.for_medicine(make_medicine(price="5.00"), quantity=2)
        with pytest.raises(ValidationError, match="exceeds"):
            item.change_discount(Money.of("10.01"))

    def test_quantity_drop_below_discount_rejected(self):
        item = LineItem.for_medicine(make_medicine(price="5.00"), quantity=4)
        item.change_discount(Money.of("15.00"))
        with pytest.raises(ValidationError, match="exceeds"):
            item.change_quantity(2)
        assert item.quantity == 4


class TestFreeText:

    def test_set_text_does_not_touch_pricing(self):
        item = LineItem.for_medicine(make_medicine(price="3.00"), quantity=2)
        item.set_text("dosage", "1 tablet")
        item.set_text("frequency", "Twice daily")
        item.set_text("instructions", "After meals")
        assert item.dosage == "1 tablet"
        assert item.total_price == Money.of("6.00")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError, match="Unknown free-text field"):
            LineItem.blank().set_text("unit_price", "0")


class TestValidationErrors:

    def test_unselected_row_reports_missing_medicine(self):
        errors = LineItem.blank().validation_errors()
        assert "Medicine is required" in errors

    def test_prescription_rows_need_directions(self):
        item = LineItem.for_medicine(make_medicine())
        errors = item.validation_errors(require_directions=True)
        assert errors == ["Dosage is required", "Frequency is required"]

    def test_point_of_sale_rows_do_not_need_directions(self):
        item = LineItem.for_medicine(make_medicine())
        assert item.validation_errors(require_directions=False) == []

    def test_to_input_omits_server_fields(self):
        item = LineItem.for_medicine(make_medicine(id=9, price="4.00"), quantity=2)
        item.id = 55
        item.dispensed = True
        payload = item.to_input()
        assert payload.medicine_id == 9
        assert payload.quantity == 2
        assert payload.unit_price == Money.of("4.00")
        assert not hasattr(payload, "id")
        assert not hasattr(payload, "dispensed")
        assert not hasattr(payload, "total_price")
        assert payload.line_discount.amount == Decimal("0.00")
