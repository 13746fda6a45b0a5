"""Tests for the linearly weighted moving average."""

import pytest
from decimal import Decimal

from fincore.indicators import latest_defined, linear_weights, ratio_series, weighted_sma


class TestLinearWeights:
    """Tests for window weights."""

    def test_weights_decrease_from_one(self):
        weights = linear_weights(4)
        assert weights == [Decimal("1"), Decimal("0.75"), Decimal("0.5"), Decimal("0.25")]

    def test_non_positive_period(self):
        assert linear_weights(0) == []
        assert linear_weights(-3) == []


class TestWeightedSMA:
    """Tests for weighted_sma."""

    def test_weighted_sma_basic(self):
        """Weights (3/3, 2/3, 1/3) over (5, 4, 3) give 13/3."""
        values = [Decimal(str(i)) for i in range(1, 6)]  # 1-5
        result = weighted_sma(values, 3)

        assert result[0] is None
        assert result[1] is None

        # (5*1 + 4*2/3 + 3*1/3) / 2 = 4.333...
        assert abs(result[4] - Decimal("4.333333")) < Decimal("0.000001")

        # (3*1 + 2*2/3 + 1*1/3) / 2 = 2.333...
        assert abs(result[2] - Decimal("2.333333")) < Decimal("0.000001")

    def test_not_equal_weight_average(self):
        """The newest sample is over-weighted relative to a plain mean."""
        result = weighted_sma([1, 2, 3], 3)
        assert result[2] > Decimal("2")

    def test_undefined_until_window_fills(self):
        values = [Decimal("10")] * 30
        for period in (1, 5, 20, 30):
            result = weighted_sma(values, period)
            assert len(result) == 30
            assert all(v is None for v in result[: period - 1])
            assert all(v is not None for v in result[period - 1 :])

    def test_period_one_is_identity(self):
        assert weighted_sma([3, 1, 4], 1) == [Decimal("3"), Decimal("1"), Decimal("4")]

    def test_constant_series_is_exact(self):
        """Decimal weights for 20 and 50 are exact, so a flat series stays flat."""
        values = [Decimal("100")] * 60
        for period in (20, 50):
            defined = [v for v in weighted_sma(values, period) if v is not None]
            assert defined
            assert all(v == Decimal("100") for v in defined)

    def test_insufficient_data(self):
        """Window longer than the series yields all None."""
        result = weighted_sma([Decimal("100"), Decimal("101")], 3)
        assert result == [None, None]

    def test_non_positive_period(self):
        assert weighted_sma([1, 2, 3], 0) == [None, None, None]
        assert weighted_sma([1, 2, 3], -1) == [None, None, None]

    def test_empty_input(self):
        assert weighted_sma([], 3) == []

    def test_nan_propagates(self):
        """A NaN sample poisons every window that contains it."""
        result = weighted_sma([1, float("nan"), 3, 4], 2)
        assert result[1].is_nan()
        assert result[2].is_nan()
        assert not result[3].is_nan()

    def test_opposite_infinities_give_nan(self):
        """Undefined arithmetic yields NaN rather than raising."""
        result = weighted_sma([float("inf"), float("-inf")], 2)
        assert result[0] is None
        assert result[1].is_nan()

    def test_infinity_propagates(self):
        result = weighted_sma([1, float("inf")], 2)
        assert result[1] == Decimal("Infinity")

    def test_float_input_accepted(self):
        result = weighted_sma([1.5, 2.5], 2)
        # (2.5*1 + 1.5*0.5) / 1.5
        assert abs(result[1] - Decimal("2.1666666")) < Decimal("0.00001")

    def test_recomputation_is_identical(self):
        values = [Decimal(str(v)) for v in (101.3, 99.8, 102.4, 100.1, 98.7, 103.9, 104.2)]
        assert weighted_sma(values, 4) == weighted_sma(values, 4)


class TestRatioSeries:
    """Tests for ratio_series and latest_defined."""

    def test_ratio_defined_where_both_defined(self):
        num = [None, Decimal("2"), Decimal("3"), None]
        den = [Decimal("1"), None, Decimal("2"), Decimal("4")]
        assert ratio_series(num, den) == [None, None, Decimal("1.5"), None]

    def test_zero_denominator_undefined(self):
        assert ratio_series([Decimal("1")], [Decimal("0")]) == [None]

    def test_infinite_ratio_is_nan(self):
        result = ratio_series([Decimal("Infinity")], [Decimal("Infinity")])
        assert result[0].is_nan()

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            ratio_series([Decimal("1")], [])

    def test_latest_defined(self):
        assert latest_defined([None, Decimal("1"), Decimal("2"), None]) == Decimal("2")
        assert latest_defined([None, None]) is None
        assert latest_defined([]) is None
