"""
Return Metrics

Absolute return, CAGR, and XIRR for irregular cashflows. XIRR uses
Newton-Raphson on XNPV with actual/365 exponents, like Excel's XIRR().
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Union

from navreturns.calculations.dates import (
    DAYS_PER_YEAR,
    days_between,
    subtract_months,
    year_fraction,
)
from navreturns.calculations.nav import (
    InsufficientNavDataError,
    NavSeries,
    find_on_or_before,
    require_nav,
)

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 1e-7
DEFAULT_GUESS = 0.1

# Minimum span before a trailing return is annualized
MIN_ANNUALIZE_DAYS = 30

TRAILING_PERIODS: Dict[str, int] = {
    "1m": 1,
    "3m": 3,
    "6m": 6,
    "1y": 12,
    "3y": 36,
    "5y": 60,
}


@dataclass(frozen=True)
class Cashflow:
    """Signed cashflow: negative = paid by the investor, positive = returned."""

    amount: float
    date: date


@dataclass(frozen=True)
class Converged:
    rate: float
    iterations: int


@dataclass(frozen=True)
class DidNotConverge:
    reason: str
    iterations: int


XirrOutcome = Union[Converged, DidNotConverge]


def absolute_return(final_value: float, total_invested: float) -> float:
    """
    Calculate absolute return as a decimal.

    Returns:
        (final - invested) / invested, or 0 when nothing was invested
    """
    if total_invested == 0:
        return 0.0
    return (final_value - total_invested) / total_invested


def cagr(final_value: float, total_invested: float, years: float) -> float:
    """
    Calculate Compound Annual Growth Rate as a decimal.

    Args:
        final_value: Value at the end of the period
        total_invested: Value at the start of the period
        years: Elapsed fractional years (actual days / 365)

    Returns:
        CAGR, or 0 if years <= 0 or either value is non-positive
    """
    if years <= 0 or total_invested <= 0 or final_value <= 0:
        return 0.0
    return (final_value / total_invested) ** (1 / years) - 1


def cagr_between(
    start_value: float, end_value: float, start_date: date, end_date: date
) -> float:
    """CAGR over the actual/365 year fraction between two dates."""
    return cagr(end_value, start_value, year_fraction(start_date, end_date))


def calculate_xnpv(cashflows: Sequence[Cashflow], rate: float) -> float:
    """Calculate XNPV with exponents measured from the first cashflow date."""
    base_date = cashflows[0].date
    xnpv = 0.0

    for cf in cashflows:
        years = days_between(base_date, cf.date) / DAYS_PER_YEAR
        xnpv += cf.amount / ((1 + rate) ** years)

    return xnpv


def _xnpv_derivative(cashflows: Sequence[Cashflow], rate: float) -> float:
    """Calculate derivative of XNPV with respect to rate."""
    base_date = cashflows[0].date
    dxnpv = 0.0

    for cf in cashflows:
        years = days_between(base_date, cf.date) / DAYS_PER_YEAR
        dxnpv -= (years * cf.amount) / ((1 + rate) ** (years + 1))

    return dxnpv


def solve_xirr(
    cashflows: Sequence[Cashflow],
    guess: float = DEFAULT_GUESS,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
) -> XirrOutcome:
    """
    Solve XIRR with Newton-Raphson.

    Converges when |XNPV(r)| < tolerance. The rate is never evaluated at or
    below -1, where (1 + r) ** t is undefined.

    Args:
        cashflows: Cashflows ordered so that the first one anchors the day count
        guess: Initial rate
        max_iterations: Iteration cap
        tolerance: Absolute XNPV tolerance

    Returns:
        Converged(rate, iterations) or DidNotConverge(reason, iterations)
    """
    if len(cashflows) < 2:
        return DidNotConverge("at least 2 cash flows required", 0)

    rate = guess

    for iteration in range(max_iterations):
        if rate <= -1:
            return DidNotConverge("rate fell to -100% or below", iteration)

        try:
            xnpv = calculate_xnpv(cashflows, rate)
            dxnpv = _xnpv_derivative(cashflows, rate)
        except (OverflowError, ZeroDivisionError):
            return DidNotConverge("numeric overflow", iteration)

        if abs(xnpv) < tolerance:
            return Converged(rate, iteration)

        if dxnpv == 0:
            return DidNotConverge("derivative is zero", iteration)

        rate = rate - xnpv / dxnpv

    return DidNotConverge("iteration limit reached", max_iterations)


def calculate_xirr(cashflows: Sequence[Cashflow], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate XIRR as a decimal (e.g., 0.15 for 15%).

    Non-convergence is reported as 0 rather than raised, so callers can
    always render a value.
    """
    outcome = solve_xirr(cashflows, guess)
    if isinstance(outcome, Converged):
        return outcome.rate

    if len(cashflows) >= 2:
        logger.warning(
            f"XIRR did not converge ({outcome.reason}) after "
            f"{outcome.iterations} iterations; reporting 0"
        )
    return 0.0


@dataclass(frozen=True)
class PointToPointReturn:
    """Return between two resolved NAV observations."""

    period: str
    start_date: date
    end_date: date
    start_nav: float
    end_nav: float
    simple_return: float
    annualized_return: Optional[float]
    duration_days: int


def trailing_return(series: NavSeries, period: str, as_of: date) -> PointToPointReturn:
    """
    Calculate the trailing return for a look-back period ending at ``as_of``.

    Both ends resolve to the NAV observed on or before the target date.

    Args:
        series: NAV series
        period: One of TRAILING_PERIODS ("1m", "3m", "6m", "1y", "3y", "5y")
        as_of: Reference date

    Raises:
        ValueError: If the period is unknown
        InsufficientNavDataError: If either end has no NAV on or before it
    """
    if period not in TRAILING_PERIODS:
        raise ValueError(f"Unknown period '{period}'")

    start_target = subtract_months(as_of, TRAILING_PERIODS[period])
    end_point = require_nav(find_on_or_before(series, as_of), as_of, "ending NAV")
    start_point = require_nav(
        find_on_or_before(series, start_target), start_target, "starting NAV"
    )

    days = days_between(start_point.date, end_point.date)
    annualized = None
    if days >= MIN_ANNUALIZE_DAYS:
        annualized = cagr(end_point.nav, start_point.nav, days / DAYS_PER_YEAR)

    return PointToPointReturn(
        period=period,
        start_date=start_point.date,
        end_date=end_point.date,
        start_nav=start_point.nav,
        end_nav=end_point.nav,
        simple_return=absolute_return(end_point.nav, start_point.nav),
        annualized_return=annualized,
        duration_days=days,
    )


def trailing_returns(series: NavSeries, as_of: Optional[date] = None) -> List[PointToPointReturn]:
    """
    Calculate every trailing period that has enough history.

    Args:
        series: NAV series
        as_of: Reference date (defaults to the last observation)
    """
    if not series:
        return []
    if as_of is None:
        as_of = series.last.date

    results = []
    for period in TRAILING_PERIODS:
        try:
            results.append(trailing_return(series, period, as_of))
        except InsufficientNavDataError as e:
            logger.debug(f"Skipping {period} trailing return: {e}")
    return results
