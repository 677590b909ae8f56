"""
Engine entry points.

Takes raw NAV observations and plain parameters, runs the calculations and
returns rounded, JSON-serializable result models.
"""

import logging
from datetime import date
from typing import Any, Iterable, List, Optional, Union

from pydantic import TypeAdapter

from navreturns.calculations import rolling, simulators
from navreturns.calculations.nav import NavSeries, parse_nav_series
from navreturns.calculations.returns import trailing_returns
from navreturns.config import get_settings
from navreturns.models import (
    LumpsumInput,
    RollingReturnInput,
    RollingReturnResult,
    SimulationInput,
    SimulationResult,
    SipInput,
    StepUpSipInput,
    StepUpSwpInput,
    SwpInput,
    TrailingReturnResult,
)

logger = logging.getLogger(__name__)

_simulation_input = TypeAdapter(SimulationInput)


def load_nav_series(nav_entries: Union[NavSeries, Iterable[Any]]) -> NavSeries:
    """Parse raw NAV entries with the configured date format."""
    if isinstance(nav_entries, NavSeries):
        return nav_entries
    settings = get_settings()
    return parse_nav_series(nav_entries, settings.nav_date_format)


def parse_simulation_input(params: Union[dict, SimulationInput]) -> SimulationInput:
    """Validate a parameter dict into the variant-specific input model."""
    if isinstance(params, dict):
        return _simulation_input.validate_python(params)
    return params


def run_simulation(series: NavSeries, params: SimulationInput) -> simulators.SimulationOutcome:
    """Dispatch to the simulator for the parameter variant."""
    if isinstance(params, LumpsumInput):
        return simulators.simulate_lumpsum(
            series, params.amount, params.from_date, params.to_date
        )
    if isinstance(params, SipInput):
        return simulators.simulate_sip(
            series,
            params.amount,
            params.from_date,
            params.to_date,
            frequency=params.frequency.value,
        )
    if isinstance(params, StepUpSipInput):
        return simulators.simulate_step_up_sip(
            series,
            params.initial_amount,
            params.from_date,
            params.to_date,
            params.step_up_percent,
            frequency=params.frequency.value,
        )
    if isinstance(params, SwpInput):
        return simulators.simulate_swp(
            series,
            params.initial_investment,
            params.monthly_withdrawal,
            params.from_date,
            params.to_date,
            frequency=params.frequency.value,
        )
    if isinstance(params, StepUpSwpInput):
        return simulators.simulate_step_up_swp(
            series,
            params.initial_investment,
            params.initial_monthly_withdrawal,
            params.from_date,
            params.to_date,
            params.step_up_percent,
            frequency=params.frequency.value,
        )
    raise TypeError(f"Unsupported simulation input: {type(params).__name__}")


def simulate(
    nav_entries: Union[NavSeries, Iterable[Any]], params: Union[dict, SimulationInput]
) -> SimulationResult:
    """
    Run a lumpsum, SIP, step-up SIP, SWP or step-up SWP simulation.

    Args:
        nav_entries: Raw NAV observations or a parsed NavSeries
        params: Variant parameters (dict with a ``variant`` key, or input model)

    Returns:
        SimulationResult rounded for display

    Raises:
        pydantic.ValidationError: If the parameters are invalid
        InsufficientNavDataError: If an anchor NAV cannot be resolved
    """
    params = parse_simulation_input(params)
    series = load_nav_series(nav_entries)

    outcome = run_simulation(series, params)
    logger.info(
        f"{params.variant} simulation {params.from_date} to {params.to_date}: "
        f"invested={outcome.total_invested:.2f} value={outcome.final_value:.2f} "
        f"over {len(series)} NAV points"
    )

    return SimulationResult.from_outcome(outcome, get_settings().rounding_decimals)


def analyze_rolling_returns(
    nav_entries: Union[NavSeries, Iterable[Any]],
    params: Union[dict, RollingReturnInput],
) -> RollingReturnResult:
    """
    Calculate rolling returns for a window length.

    The inception date defaults to ``settings.default_inception_date``.
    """
    if isinstance(params, dict):
        params = RollingReturnInput.model_validate(params)

    settings = get_settings()
    series = load_nav_series(nav_entries)
    inception = params.inception_date or settings.default_inception_date

    result = rolling.calculate_rolling_returns(series, params.window_years, inception)
    logger.info(
        f"{params.window_years}y rolling returns: {len(result.samples)} windows"
    )

    return RollingReturnResult.from_rolling(result, settings.rounding_decimals)


def compute_trailing_returns(
    nav_entries: Union[NavSeries, Iterable[Any]], as_of: Optional[date] = None
) -> List[TrailingReturnResult]:
    """Trailing 1m/3m/6m/1y/3y/5y returns ending at ``as_of`` (default: last NAV)."""
    settings = get_settings()
    series = load_nav_series(nav_entries)
    return [
        TrailingReturnResult.from_return(result, settings.rounding_decimals)
        for result in trailing_returns(series, as_of)
    ]
