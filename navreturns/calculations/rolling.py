"""
Rolling Returns

Annualized returns over every fixed-length window that fits in a NAV history,
with summary statistics describing return consistency.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

import numpy as np

from navreturns.calculations.dates import add_years, days_between, year_fraction
from navreturns.calculations.nav import NavSeries, find_on_or_after
from navreturns.calculations.returns import cagr

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollingSample:
    window_start: date
    window_end: date
    annualized_return: float  # decimal


@dataclass(frozen=True)
class RollingReturns:
    window_years: int
    samples: Tuple[RollingSample, ...] = ()
    average: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    standard_deviation: float = 0.0


def calculate_rolling_returns(
    series: NavSeries, window_years: int, inception: Optional[date] = None
) -> RollingReturns:
    """
    Calculate rolling CAGR for every window start in the series.

    Each observation up to ``last date - window_years`` starts a window. The
    window ends at the first NAV on or after ``start + window_years``, and the
    CAGR uses the actual elapsed years between the two NAV dates.

    Args:
        series: NAV series
        window_years: Window length in whole years
        inception: Observations before this date are ignored

    Returns:
        RollingReturns with population standard deviation; all zeros and no
        samples if no window fits
    """
    if window_years <= 0:
        raise ValueError("window_years must be positive")

    if inception is not None:
        series = series.since(inception)

    if len(series) < 2:
        return RollingReturns(window_years=window_years)

    last_start = add_years(series.last.date, -window_years)
    samples = []

    for start_point in series:
        if start_point.date > last_start:
            break

        target_end = add_years(start_point.date, window_years)
        end_point = find_on_or_after(series, target_end, fallback_to_last=False)
        if end_point is None:
            continue

        if days_between(start_point.date, end_point.date) <= 0:
            continue

        years = year_fraction(start_point.date, end_point.date)
        samples.append(
            RollingSample(
                window_start=start_point.date,
                window_end=end_point.date,
                annualized_return=cagr(end_point.nav, start_point.nav, years),
            )
        )

    if not samples:
        logger.debug(f"No {window_years}y rolling windows fit in {series!r}")
        return RollingReturns(window_years=window_years)

    values = np.array([s.annualized_return for s in samples], dtype=float)

    return RollingReturns(
        window_years=window_years,
        samples=tuple(samples),
        average=float(values.mean()),
        minimum=float(values.min()),
        maximum=float(values.max()),
        standard_deviation=float(values.std(ddof=0)),
    )
