"""
Decimal money helpers used by the order store and the bill engine.
"""
from decimal import Decimal

import pytest

from core_backend.exceptions import InvalidInput
from core_backend.utils.money import to_decimal, quantize_money, line_amount, sum_amounts


class TestMoneyHelpers:

    def test_floats_convert_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [None, "", "abc", [1]])
    def test_non_numeric_input_is_invalid(self, value):
        with pytest.raises(InvalidInput):
            to_decimal(value, "rate")

    def test_missing_value_names_the_field(self):
        with pytest.raises(InvalidInput) as exc_info:
            to_decimal(None, "cash_received")
        assert exc_info.value.details == {"field": "cash_received"}

    def test_quantize_rounds_half_up(self):
        assert quantize_money("2.345") == Decimal("2.35")
        assert quantize_money("2.344") == Decimal("2.34")

    def test_line_amount_is_quantity_times_rate(self):
        assert line_amount(2, Decimal("20")) == Decimal("40.00")
        assert line_amount(Decimal("1.5"), Decimal("15.50")) == Decimal("23.25")

    def test_negative_quantity_gives_negative_amount(self):
        assert line_amount(-1, "15.50") == Decimal("-15.50")

    def test_sum_amounts(self):
        assert sum_amounts([Decimal("40.00"), Decimal("60.00"), Decimal("-15.50")]) == Decimal("84.50")
        assert sum_amounts([]) == Decimal("0.00")
