"""
Cashflow Simulators

Replays investor cashflow schedules against historical NAVs:
lumpsum, SIP, step-up SIP, SWP and step-up SWP.

All variants share one schedule generator. Contributions and withdrawals are
converted to units at the NAV resolved on or after the scheduled date. SIP
contributions never resolve past the last observation inside the period.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from itertools import chain
from typing import Iterator, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from navreturns.calculations.dates import add_years, generate_periodic_dates
from navreturns.calculations.growth import GrowthCurve, GrowthPoint
from navreturns.calculations.nav import NavSeries, find_on_or_after, require_nav
from navreturns.calculations.returns import (
    Cashflow,
    absolute_return,
    cagr_between,
    calculate_xirr,
)

logger = logging.getLogger(__name__)

FREQUENCY_INTERVALS = {
    "weekly": relativedelta(weeks=1),
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
}

WITHDRAWAL_FREQUENCIES = ("monthly", "quarterly")


class Variant(str, Enum):
    LUMPSUM = "lumpsum"
    SIP = "sip"
    STEP_UP_SIP = "step_up_sip"
    SWP = "swp"
    STEP_UP_SWP = "step_up_swp"


@dataclass(frozen=True)
class ScheduledFlow:
    """A contribution or withdrawal due on a scheduled date."""

    date: date
    amount: float


@dataclass(frozen=True)
class SimulationOutcome:
    """Unrounded result of a simulation."""

    variant: Variant
    total_invested: float
    final_value: float
    total_units: float
    absolute_return: float  # decimal
    annualized_return: float  # decimal (CAGR or XIRR)
    growth: Tuple[GrowthPoint, ...] = ()
    cashflows: Tuple[Cashflow, ...] = ()
    total_withdrawn: Optional[float] = None
    corpus_ran_out_date: Optional[date] = None
    start_nav_date: Optional[date] = None
    end_nav_date: Optional[date] = None
    contributions: int = 0


def interval_for(
    frequency: str, allowed: Optional[Tuple[str, ...]] = None
) -> relativedelta:
    """Calendar step between scheduled flows for a frequency name."""
    if allowed is not None and frequency not in allowed:
        raise ValueError(f"Unsupported frequency '{frequency}'")
    try:
        return FREQUENCY_INTERVALS[frequency]
    except KeyError:
        raise ValueError(f"Unsupported frequency '{frequency}'") from None


def scheduled_flows(
    start_date: date,
    end_date: date,
    amount: float,
    step_up_percent: float = 0.0,
    interval: relativedelta = FREQUENCY_INTERVALS["monthly"],
    first_offset: int = 0,
    include_end: bool = True,
) -> Iterator[ScheduledFlow]:
    """
    Generate the contribution/withdrawal schedule.

    Flows fall on ``start_date + k * interval``. The amount grows
    by ``step_up_percent`` (compounded) once a scheduled date reaches each
    1-year anniversary of ``start_date``, so a step-up between two scheduled
    dates applies from the next flow onwards.

    Args:
        start_date: Schedule anchor (and step-up anniversary anchor)
        end_date: Last date a flow may fall on
        amount: Amount of the first flow
        step_up_percent: Annual escalation in percent (e.g., 10 for 10%)
        interval: Calendar step between flows
        first_offset: Number of intervals before the first flow
        include_end: If False, a flow dated on ``end_date`` is excluded
    """
    current_amount = amount
    anniversaries = 1
    next_step_up = add_years(start_date, anniversaries)

    for flow_date in generate_periodic_dates(
        start_date, end_date, interval, first_offset
    ):
        if not include_end and flow_date >= end_date:
            break

        while flow_date >= next_step_up:
            current_amount *= 1 + step_up_percent / 100
            anniversaries += 1
            next_step_up = add_years(start_date, anniversaries)

        yield ScheduledFlow(flow_date, current_amount)


def empty_outcome(variant: Variant) -> SimulationOutcome:
    """Zero-valued result used when there is no NAV data to simulate against."""
    return SimulationOutcome(
        variant=variant,
        total_invested=0.0,
        final_value=0.0,
        total_units=0.0,
        absolute_return=0.0,
        annualized_return=0.0,
        total_withdrawn=0.0 if variant in (Variant.SWP, Variant.STEP_UP_SWP) else None,
    )


def simulate_lumpsum(
    series: NavSeries, amount: float, from_date: date, to_date: date
) -> SimulationOutcome:
    """
    Simulate a one-time investment held from ``from_date`` to ``to_date``.

    Units are bought at the NAV on or after ``from_date`` and valued at the
    NAV on or after ``to_date``. CAGR uses the actual days between the two
    NAV dates.

    Raises:
        InsufficientNavDataError: If a starting or ending NAV cannot be resolved
    """
    if not series:
        return empty_outcome(Variant.LUMPSUM)

    start_point = require_nav(find_on_or_after(series, from_date), from_date, "starting NAV")
    end_point = require_nav(find_on_or_after(series, to_date), to_date, "ending NAV")

    units = amount / start_point.nav
    final_value = units * end_point.nav

    curve = GrowthCurve()
    for point in series.between(start_point.date, min(end_point.date, to_date)):
        curve.add(point.date, units * point.nav)
    if curve.last is None or curve.last.date != to_date:
        curve.add(to_date, final_value)

    return SimulationOutcome(
        variant=Variant.LUMPSUM,
        total_invested=amount,
        final_value=final_value,
        total_units=units,
        absolute_return=absolute_return(final_value, amount),
        annualized_return=cagr_between(amount, final_value, start_point.date, end_point.date),
        growth=tuple(curve),
        cashflows=(
            Cashflow(-amount, start_point.date),
            Cashflow(final_value, end_point.date),
        ),
        start_nav_date=start_point.date,
        end_nav_date=end_point.date,
        contributions=1,
    )


def _simulate_contributions(
    variant: Variant,
    series: NavSeries,
    amount: float,
    from_date: date,
    to_date: date,
    step_up_percent: float,
    interval: relativedelta,
) -> SimulationOutcome:
    if not series:
        return empty_outcome(variant)

    window = series.between(from_date, to_date)
    if not window:
        logger.debug(f"No NAV observations between {from_date} and {to_date}")
        return empty_outcome(variant)

    schedule = scheduled_flows(
        from_date,
        to_date,
        amount,
        step_up_percent=step_up_percent,
        interval=interval,
        include_end=False,
    )

    units = 0.0
    invested = 0.0
    contributions = 0
    cashflows: List[Cashflow] = []
    curve = GrowthCurve()

    def buy(flow: ScheduledFlow) -> None:
        nonlocal units, invested, contributions
        nav_point = find_on_or_after(window, flow.date)
        if nav_point is None:
            logger.debug(f"No NAV for contribution on {flow.date}; skipped")
            return
        units += flow.amount / nav_point.nav
        invested += flow.amount
        contributions += 1
        cashflows.append(Cashflow(-flow.amount, nav_point.date))

    pending = next(schedule, None)
    for point in window:
        while pending is not None and pending.date <= point.date:
            buy(pending)
            pending = next(schedule, None)
        curve.add(point.date, units * point.nav, invested)

    # Contributions due after the last observation in range are priced at it
    if pending is not None:
        for flow in chain([pending], schedule):
            buy(flow)
        curve.revalue_last(units * window.last.nav, invested)

    if invested == 0:
        return empty_outcome(variant)

    final_value = units * window.last.nav
    cashflows.append(Cashflow(final_value, to_date))

    return SimulationOutcome(
        variant=variant,
        total_invested=invested,
        final_value=final_value,
        total_units=units,
        absolute_return=absolute_return(final_value, invested),
        annualized_return=calculate_xirr(cashflows),
        growth=tuple(curve),
        cashflows=tuple(cashflows),
        start_nav_date=window.first.date,
        end_nav_date=window.last.date,
        contributions=contributions,
    )


def simulate_sip(
    series: NavSeries,
    amount: float,
    from_date: date,
    to_date: date,
    frequency: str = "monthly",
) -> SimulationOutcome:
    """
    Simulate a SIP of a fixed amount.

    Contributions fall on ``from_date`` and every interval after it, strictly
    before ``to_date``. The annualized return is the XIRR of the contributions
    against the final value dated ``to_date``.
    """
    return _simulate_contributions(
        Variant.SIP, series, amount, from_date, to_date, 0.0, interval_for(frequency)
    )


def simulate_step_up_sip(
    series: NavSeries,
    initial_amount: float,
    from_date: date,
    to_date: date,
    step_up_percent: float,
    frequency: str = "monthly",
) -> SimulationOutcome:
    """Simulate a SIP whose amount grows by ``step_up_percent`` every year."""
    return _simulate_contributions(
        Variant.STEP_UP_SIP,
        series,
        initial_amount,
        from_date,
        to_date,
        step_up_percent,
        interval_for(frequency),
    )


def _simulate_withdrawals(
    variant: Variant,
    series: NavSeries,
    initial_investment: float,
    withdrawal: float,
    from_date: date,
    to_date: date,
    step_up_percent: float,
    interval: relativedelta,
) -> SimulationOutcome:
    if not series:
        return empty_outcome(variant)

    start_point = require_nav(find_on_or_after(series, from_date), from_date, "starting NAV")

    units = initial_investment / start_point.nav
    withdrawn = 0.0
    corpus_ran_out_date = None
    cashflows = [Cashflow(-initial_investment, start_point.date)]

    curve = GrowthCurve()
    curve.add(from_date, initial_investment)

    schedule = scheduled_flows(
        from_date,
        to_date,
        withdrawal,
        step_up_percent=step_up_percent,
        interval=interval,
        first_offset=1,
    )

    for flow in schedule:
        nav_point = require_nav(find_on_or_after(series, flow.date), flow.date)
        current_value = units * nav_point.nav

        if current_value < flow.amount:
            # Corpus exhausted: withdraw whatever is left
            paid_out = current_value
            units = 0.0
            corpus_ran_out_date = flow.date
        else:
            paid_out = flow.amount
            units -= flow.amount / nav_point.nav

        withdrawn += paid_out
        if paid_out > 0:
            cashflows.append(Cashflow(paid_out, nav_point.date))
        curve.add(flow.date, units * nav_point.nav)

        if corpus_ran_out_date is not None:
            logger.debug(f"Corpus ran out on {corpus_ran_out_date}")
            break

    end_point = require_nav(find_on_or_after(series, to_date), to_date, "ending NAV")
    final_value = units * end_point.nav
    if final_value > 0:
        cashflows.append(Cashflow(final_value, to_date))

    return SimulationOutcome(
        variant=variant,
        total_invested=initial_investment,
        final_value=final_value,
        total_units=units,
        absolute_return=absolute_return(withdrawn + final_value, initial_investment),
        annualized_return=calculate_xirr(cashflows),
        growth=tuple(curve),
        cashflows=tuple(cashflows),
        total_withdrawn=withdrawn,
        corpus_ran_out_date=corpus_ran_out_date,
        start_nav_date=start_point.date,
        end_nav_date=end_point.date,
        contributions=1,
    )


def simulate_swp(
    series: NavSeries,
    initial_investment: float,
    monthly_withdrawal: float,
    from_date: date,
    to_date: date,
    frequency: str = "monthly",
) -> SimulationOutcome:
    """
    Simulate an SWP: a lumpsum purchase followed by fixed withdrawals.

    Withdrawals start one interval after ``from_date`` and run through
    ``to_date`` unless the corpus runs out first.
    """
    return _simulate_withdrawals(
        Variant.SWP,
        series,
        initial_investment,
        monthly_withdrawal,
        from_date,
        to_date,
        0.0,
        interval_for(frequency, WITHDRAWAL_FREQUENCIES),
    )


def simulate_step_up_swp(
    series: NavSeries,
    initial_investment: float,
    initial_monthly_withdrawal: float,
    from_date: date,
    to_date: date,
    step_up_percent: float,
    frequency: str = "monthly",
) -> SimulationOutcome:
    """Simulate an SWP whose withdrawal grows by ``step_up_percent`` every year."""
    return _simulate_withdrawals(
        Variant.STEP_UP_SWP,
        series,
        initial_investment,
        initial_monthly_withdrawal,
        from_date,
        to_date,
        step_up_percent,
        interval_for(frequency, WITHDRAWAL_FREQUENCIES),
    )
