"""
Tests for return metrics: absolute return, CAGR, XIRR and trailing returns.
"""

import pytest
from datetime import date

from navreturns.calculations.nav import InsufficientNavDataError, NavSeries
from navreturns.calculations.returns import (
    Cashflow,
    Converged,
    DidNotConverge,
    absolute_return,
    cagr,
    cagr_between,
    calculate_xirr,
    calculate_xnpv,
    solve_xirr,
    trailing_return,
    trailing_returns,
)


class TestClosedFormReturns:
    """Test absolute return and CAGR."""

    def test_absolute_return(self):
        assert absolute_return(110, 100) == pytest.approx(0.10)
        assert absolute_return(90, 100) == pytest.approx(-0.10)

    def test_absolute_return_nothing_invested(self):
        assert absolute_return(50, 0) == 0.0

    def test_cagr_two_years(self):
        """1.21x over two years is 10% a year."""
        assert cagr(121, 100, 2.0) == pytest.approx(0.10)

    def test_cagr_guards(self):
        assert cagr(121, 100, 0) == 0.0
        assert cagr(121, 100, -1) == 0.0
        assert cagr(0, 100, 1) == 0.0
        assert cagr(121, 0, 1) == 0.0

    def test_cagr_between_uses_365_day_years(self):
        # 2021 is not a leap year: exactly one year
        assert cagr_between(100, 110, date(2021, 1, 1), date(2022, 1, 1)) == pytest.approx(0.10)
        # 2020 is: 366 / 365 years, slightly under 10%
        rate = cagr_between(100, 110, date(2020, 1, 1), date(2021, 1, 1))
        assert rate == pytest.approx(1.1 ** (365 / 366) - 1)


class TestXIRR:
    """Test XIRR Newton-Raphson solver."""

    def test_one_year_ten_percent(self):
        """Invest 1000, receive 1100 exactly 365 days later."""
        cashflows = [Cashflow(-1000, date(2021, 1, 1)), Cashflow(1100, date(2022, 1, 1))]
        outcome = solve_xirr(cashflows)
        assert isinstance(outcome, Converged)
        assert outcome.rate == pytest.approx(0.10, abs=1e-6)
        assert outcome.iterations <= 5
        assert calculate_xirr(cashflows) == pytest.approx(0.10, abs=1e-6)

    def test_negative_return(self):
        cashflows = [Cashflow(-1000, date(2021, 1, 1)), Cashflow(900, date(2022, 1, 1))]
        assert calculate_xirr(cashflows) == pytest.approx(-0.10, abs=1e-6)

    def test_multiple_cashflows(self):
        """Rate found makes XNPV vanish."""
        cashflows = [
            Cashflow(-5000, date(2020, 1, 1)),
            Cashflow(-5000, date(2020, 7, 1)),
            Cashflow(-5000, date(2021, 1, 1)),
            Cashflow(17000, date(2021, 12, 31)),
        ]
        rate = calculate_xirr(cashflows)
        assert rate > 0
        assert abs(calculate_xnpv(cashflows, rate)) < 1e-6

    def test_fewer_than_two_cashflows(self):
        cashflows = [Cashflow(-1000, date(2021, 1, 1))]
        assert isinstance(solve_xirr(cashflows), DidNotConverge)
        assert calculate_xirr(cashflows) == 0.0
        assert calculate_xirr([]) == 0.0

    def test_no_sign_change_reports_zero(self):
        """Non-convergence surfaces as a 0 rate at the boundary."""
        cashflows = [Cashflow(-1000, date(2021, 1, 1)), Cashflow(-1000, date(2022, 1, 1))]
        outcome = solve_xirr(cashflows)
        assert isinstance(outcome, DidNotConverge)
        assert outcome.iterations <= 100
        assert calculate_xirr(cashflows) == 0.0

    def test_zero_derivative(self):
        """All cashflows on the same day give a zero derivative."""
        cashflows = [Cashflow(-1000, date(2021, 1, 1)), Cashflow(500, date(2021, 1, 1))]
        outcome = solve_xirr(cashflows)
        assert isinstance(outcome, DidNotConverge)
        assert outcome.reason == "derivative is zero"


class TestTrailingReturns:
    """Test point-to-point trailing returns."""

    def test_one_year(self, daily_series):
        result = trailing_return(daily_series, "1y", date(2022, 6, 30))
        assert result.start_date == date(2021, 6, 30)
        assert result.end_date == date(2022, 6, 30)
        assert result.duration_days == 365
        assert result.simple_return == pytest.approx(1.0003 ** 365 - 1)
        assert result.annualized_return == pytest.approx(result.simple_return)

    def test_short_period_not_annualized(self, daily_series_factory):
        series = daily_series_factory(date(2021, 1, 1), 60)
        # February: 28 days between the resolved NAVs
        result = trailing_return(series, "1m", date(2021, 3, 1))
        assert result.duration_days == 28
        assert result.annualized_return is None

    def test_uses_nav_on_or_before(self, three_year_series):
        result = trailing_return(three_year_series, "6m", date(2021, 12, 31))
        assert result.end_date == date(2021, 1, 1)
        assert result.start_date == date(2021, 1, 1)
        assert result.simple_return == 0.0

    def test_insufficient_history(self, daily_series):
        with pytest.raises(InsufficientNavDataError):
            trailing_return(daily_series, "5y", date(2022, 1, 1))

    def test_unknown_period(self, daily_series):
        with pytest.raises(ValueError):
            trailing_return(daily_series, "2w", date(2022, 1, 1))

    def test_all_periods_skip_missing(self, daily_series):
        results = trailing_returns(daily_series)
        assert [r.period for r in results] == ["1m", "3m", "6m", "1y", "3y"]
        assert all(r.end_date == daily_series.last.date for r in results)

    def test_empty_series(self):
        assert trailing_returns(NavSeries()) == []
