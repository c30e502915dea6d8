"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from rxdraft.domain.exceptions import ValidationError
from rxdraft.domain.model.value_objects import Money, Quantity, money2, to_decimal


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "LKR"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_from_float_goes_through_str(self):
        assert Money.of(0.1).amount == Decimal("0.1")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid amount"):
            Money.of("ten")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(1.5)

    def test_multiplication_by_int(self):
        assert Money.of("7.50") * 3 == Money.of("22.50")

    def test_multiplication_by_decimal_rejected(self):
        with pytest.raises(TypeError):
            Money.of("7.50") * Decimal("1.5")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "LKR") > Money(Decimal("5"), "USD")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "Rs.15.00"
        assert str(Money.of("9.5")) == "Rs.9.50"

    def test_zero(self):
        assert Money.zero().is_zero
        assert not Money.of("0.01").is_zero

    def test_comparison(self):
        assert Money.of("10.01") > Money.of("10")
        assert not Money.of("10") > Money.of("10.00")

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity", float("nan"), float("inf")])
    def test_of_factory_rejects_non_finite(self, raw):
        with pytest.raises(ValidationError, match="Invalid amount"):
            Money.of(raw)


class TestRounding:

    def test_money2_rounds_half_up(self):
        assert money2("2.345") == Decimal("2.35")
        assert money2("2.344") == Decimal("2.34")

    def test_money2_pads_to_cents(self):
        assert str(money2(20)) == "20.00"

    def test_to_decimal_rejects_garbage(self):
        with pytest.raises(ValidationError):
            to_decimal("abc")

    @pytest.mark.parametrize("raw", ["NaN", "sNaN", "inf", float("-inf")])
    def test_to_decimal_rejects_non_finite(self, raw):
        with pytest.raises(ValidationError, match="Invalid amount"):
            to_decimal(raw)


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(-3)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)

    def test_str(self):
        assert str(Quantity(7)) == "7"

    @pytest.mark.parametrize("raw", [3, "3", 3.0, Decimal("3.00")])
    def test_parse_whole_numbers(self, raw):
        assert Quantity.parse(raw).value == 3

    @pytest.mark.parametrize("raw", [2.7, "2.5", Decimal("0.5"), "two", "nan", True])
    def test_parse_rejects_fractions_and_garbage(self, raw):
        with pytest.raises(ValidationError):
            Quantity.parse(raw)
