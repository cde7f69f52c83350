"""
Tests für das Parsen von Formulareingaben.
"""

import pytest

from planner_pioneer.validation import (
    ValidationError,
    parse_factor_value,
    parse_float,
    parse_optional_hours,
    parse_optional_ref,
    parse_title,
    validate_pert_order,
)


class TestParsing:
    def test_title_is_stripped(self):
        assert parse_title("  Backend ") == "Backend"

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            parse_title("   ")

    def test_hours_accept_decimal_comma(self):
        assert parse_optional_hours("2,5", field="M") == 2.5

    def test_empty_hours_are_none(self):
        assert parse_optional_hours("", field="M") is None
        assert parse_optional_hours(None, field="M") is None

    def test_negative_hours_rejected(self):
        with pytest.raises(ValidationError):
            parse_optional_hours("-1", field="M")

    def test_non_numeric_rejected(self):
        with pytest.raises(ValidationError):
            parse_float("zwei", field="M")

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError):
            parse_float("inf", field="M")

    def test_factor_value_is_signed(self):
        assert parse_factor_value("+15") == 15.0
        assert parse_factor_value("-5,5 %") == -5.5

    def test_factor_value_required(self):
        with pytest.raises(ValidationError):
            parse_factor_value("")

    def test_optional_ref(self):
        assert parse_optional_ref("") is None
        assert parse_optional_ref("-") is None
        assert parse_optional_ref(" abc ") == "abc"

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)


class TestPertOrder:
    def test_valid_orders(self):
        validate_pert_order(1, 2, 3)
        validate_pert_order(None, 2, None)
        validate_pert_order(None, None, None)

    def test_optimistic_above_most_likely(self):
        with pytest.raises(ValidationError):
            validate_pert_order(5, 2, None)

    def test_pessimistic_below_most_likely(self):
        with pytest.raises(ValidationError):
            validate_pert_order(None, 2, 1)

    def test_bounds_without_most_likely(self):
        with pytest.raises(ValidationError):
            validate_pert_order(1, None, 3)
