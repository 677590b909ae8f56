"""
Tests for rolling return analysis.
"""

import math

import pytest
from datetime import date

from navreturns.calculations.nav import NavPoint, NavSeries
from navreturns.calculations.rolling import calculate_rolling_returns


@pytest.fixture
def yearly_series():
    """Yearly NAVs over non-leap years: +10%, -10%, +30%."""
    return NavSeries(
        [
            NavPoint(date(2017, 1, 1), 10.0),
            NavPoint(date(2018, 1, 1), 11.0),
            NavPoint(date(2019, 1, 1), 9.9),
            NavPoint(date(2020, 1, 1), 12.87),
        ]
    )


class TestRollingReturns:
    """Test rolling CAGR windows and their statistics."""

    def test_one_year_windows(self, yearly_series):
        result = calculate_rolling_returns(yearly_series, 1)
        assert [s.window_start for s in result.samples] == [
            date(2017, 1, 1),
            date(2018, 1, 1),
            date(2019, 1, 1),
        ]
        returns = [s.annualized_return for s in result.samples]
        assert returns == pytest.approx([0.10, -0.10, 0.30])

    def test_population_statistics(self, yearly_series):
        result = calculate_rolling_returns(yearly_series, 1)
        assert result.average == pytest.approx(0.10)
        assert result.minimum == pytest.approx(-0.10)
        assert result.maximum == pytest.approx(0.30)
        # divide by n, not n - 1
        assert result.standard_deviation == pytest.approx(math.sqrt(0.08 / 3))

    def test_constant_growth_is_consistent(self, daily_series_factory):
        series = daily_series_factory(date(2015, 1, 1), 6 * 365 + 2)
        result = calculate_rolling_returns(series, 1)

        assert result.samples[-1].window_start == date(series.last.date.year - 1, 12, 31)
        assert result.minimum <= result.average <= result.maximum
        assert result.average == pytest.approx(1.0003 ** 365 - 1)
        assert result.standard_deviation == pytest.approx(0.0, abs=1e-9)

    def test_window_bounds(self, daily_series_factory):
        """Windows never run past the nominal length plus one sampling gap."""
        series = NavSeries(
            p for p in daily_series_factory(date(2015, 1, 1), 5 * 365) if p.date.weekday() < 5
        )
        result = calculate_rolling_returns(series, 3)
        assert result.samples
        for sample in result.samples:
            span = (sample.window_end - sample.window_start).days
            assert 0 < span <= 3 * 366 + 3

    def test_window_longer_than_history(self, yearly_series):
        result = calculate_rolling_returns(yearly_series, 10)
        assert result.samples == ()
        assert result.average == result.minimum == result.maximum == 0.0
        assert result.standard_deviation == 0.0

    def test_inception_excludes_earlier_observations(self, yearly_series):
        result = calculate_rolling_returns(yearly_series, 1, inception=date(2018, 1, 1))
        assert [s.window_start for s in result.samples] == [date(2018, 1, 1), date(2019, 1, 1)]

    def test_too_few_observations(self):
        series = NavSeries([NavPoint(date(2020, 1, 1), 10.0)])
        result = calculate_rolling_returns(series, 1)
        assert result.samples == ()
        assert calculate_rolling_returns(NavSeries(), 1).samples == ()

    def test_invalid_window(self, yearly_series):
        with pytest.raises(ValueError):
            calculate_rolling_returns(yearly_series, 0)
