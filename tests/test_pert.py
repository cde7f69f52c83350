"""
Tests für den PERT-Rechner.

Abgedeckt:
- Formel (O + 4M + P) / 6
- Vorbelegung fehlender O/P-Werte mit M
- Rundung auf eine Nachkommastelle (halb weg von Null)
- fehlende Schätzung → None
- Anzeigeformat
"""

import math

import pytest

from planner_pioneer.pert import PertEstimate, compute_expected_duration, format_duration, round_one_decimal


class TestComputeExpectedDuration:
    def test_full_triple(self):
        assert compute_expected_duration(2, 4, 12) == 5.0

    def test_missing_optimistic_defaults_to_most_likely(self):
        # (5 + 20 + 10) / 6 = 5.833...
        assert compute_expected_duration(None, 5, 10) == 5.8

    def test_missing_pessimistic_defaults_to_most_likely(self):
        # (1 + 8 + 2) / 6 = 1.833...
        assert compute_expected_duration(1, 2, None) == 1.8

    def test_only_most_likely(self):
        assert compute_expected_duration(None, 4, None) == 4.0

    @pytest.mark.parametrize("m", [0, 0.04, 1.25, 3.14159, 7.5])
    def test_only_most_likely_is_rounded_most_likely(self, m):
        assert compute_expected_duration(None, m, None) == round_one_decimal(m)

    @pytest.mark.parametrize("m", [0.5, 2, 8, 13.3])
    def test_symmetric_triple_equals_most_likely(self, m):
        assert compute_expected_duration(m, m, m) == round_one_decimal(m)

    def test_no_most_likely_is_none(self):
        assert compute_expected_duration(None, None, None) is None

    def test_no_most_likely_ignores_other_values(self):
        assert compute_expected_duration(1, None, 9) is None

    def test_zero_is_a_valid_estimate(self):
        assert compute_expected_duration(None, 0, None) == 0.0

    def test_negative_inputs_are_not_rejected(self):
        assert compute_expected_duration(-6, -6, -6) == -6.0

    def test_non_finite_passes_through(self):
        assert math.isinf(compute_expected_duration(None, float("inf"), None))
        assert math.isnan(compute_expected_duration(None, float("nan"), None))

    def test_huge_estimate_does_not_raise(self):
        assert compute_expected_duration(None, 1e30, None) == pytest.approx(1e30)


class TestRounding:
    def test_half_rounds_away_from_zero(self):
        assert round_one_decimal(2.25) == 2.3
        assert round_one_decimal(0.05) == 0.1

    def test_negative_half_rounds_away_from_zero(self):
        assert round_one_decimal(-2.25) == -2.3

    def test_below_half_rounds_down(self):
        assert round_one_decimal(2.24) == 2.2

    @pytest.mark.parametrize("value", [1e27, 1e30, -3.5e40, 1.7e300])
    def test_huge_values_are_returned_unchanged(self, value):
        assert round_one_decimal(value) == value


class TestPertEstimate:
    def test_resolved_applies_defaults(self):
        assert PertEstimate(None, 3, None).resolved() == (3.0, 3.0, 3.0)
        assert PertEstimate(1, 3, None).resolved() == (1.0, 3.0, 3.0)

    def test_resolved_without_most_likely(self):
        assert PertEstimate(1, None, 5).resolved() is None
        assert not PertEstimate(1, None, 5).is_estimated

    def test_expected_matches_function(self):
        assert PertEstimate(2, 4, 12).expected() == compute_expected_duration(2, 4, 12)


class TestFormatDuration:
    def test_fractional(self):
        assert format_duration(1.5) == "1.5h"

    def test_whole_hours_drop_decimal(self):
        assert format_duration(2.0) == "2h"

    def test_rounds_to_one_decimal(self):
        assert format_duration(5.8333) == "5.8h"
        assert format_duration(0.04) == "0h"

    def test_huge_value(self):
        assert format_duration(1e30) == f"{int(1e30)}h"
