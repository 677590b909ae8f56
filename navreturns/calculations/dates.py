"""
Calendar Arithmetic

Plain date helpers used by the simulators. Every function takes and returns
immutable ``datetime.date`` values.
"""

from datetime import date
from typing import List

from dateutil.relativedelta import relativedelta

DAYS_PER_YEAR = 365.0


def add_months(start_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months."""
    return start_date + relativedelta(months=months)


def add_years(start_date: date, years: int) -> date:
    """Add calendar years (Feb 29 clamps to Feb 28)."""
    return start_date + relativedelta(years=years)


def subtract_months(start_date: date, months: int) -> date:
    return start_date - relativedelta(months=months)


def days_between(date1: date, date2: date) -> int:
    """Calculate the number of days between two dates."""
    delta = date2 - date1
    return delta.days


def year_fraction(date1: date, date2: date) -> float:
    """Actual/365 year fraction between two dates (not 365.25)."""
    return days_between(date1, date2) / DAYS_PER_YEAR


def generate_periodic_dates(
    start_date: date,
    end_date: date,
    interval: relativedelta = relativedelta(months=1),
    first_offset: int = 0,
) -> List[date]:
    """
    Generate dates at a fixed calendar interval from ``start_date`` up to ``end_date``.

    Each date is computed as ``start_date + k * interval`` rather than from the
    previous date, so month-end clamping does not drift the schedule.

    Args:
        start_date: Anchor date of the schedule
        end_date: Inclusive upper bound
        interval: Step between consecutive dates (e.g., ``relativedelta(weeks=1)``)
        first_offset: Number of intervals to skip before the first date
    """
    if start_date + interval <= start_date:
        raise ValueError("interval must be positive")

    dates = []
    period = first_offset
    current = start_date + interval * period
    while current <= end_date:
        dates.append(current)
        period += 1
        current = start_date + interval * period
    return dates
