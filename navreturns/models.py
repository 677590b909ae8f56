"""
Input parameters and results for the returns engine.

Results are plain pydantic models: monetary fields rounded to 2 decimals,
percentages already multiplied by 100.
"""

from datetime import date
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from navreturns.calculations.returns import PointToPointReturn
from navreturns.calculations.rolling import RollingReturns
from navreturns.calculations.simulators import SimulationOutcome


class Frequency(str, Enum):
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"


class WithdrawalFrequency(str, Enum):
    monthly = "monthly"
    quarterly = "quarterly"


# =============================================================================
# INPUTS
# =============================================================================


class PeriodInput(BaseModel):
    """Simulation date range. Accepts ``from``/``to`` or field names."""

    model_config = ConfigDict(populate_by_name=True)

    from_date: date = Field(alias="from")
    to_date: date = Field(alias="to")

    @model_validator(mode="after")
    def check_period(self):
        if self.to_date < self.from_date:
            raise ValueError("to date must be on or after from date")
        return self


class LumpsumInput(PeriodInput):
    """One-time investment."""

    variant: Literal["lumpsum"] = "lumpsum"
    amount: float = Field(gt=0)


class SipInput(PeriodInput):
    """Fixed recurring contribution."""

    variant: Literal["sip"] = "sip"
    amount: float = Field(gt=0)
    frequency: Frequency = Frequency.monthly


class StepUpSipInput(PeriodInput):
    """Recurring contribution escalated every year."""

    variant: Literal["step_up_sip"] = "step_up_sip"
    initial_amount: float = Field(gt=0)
    step_up_percent: float = Field(ge=0)
    frequency: Frequency = Frequency.monthly


class SwpInput(PeriodInput):
    """Lumpsum followed by fixed recurring withdrawals."""

    variant: Literal["swp"] = "swp"
    initial_investment: float = Field(gt=0)
    monthly_withdrawal: float = Field(gt=0)
    frequency: WithdrawalFrequency = WithdrawalFrequency.monthly


class StepUpSwpInput(PeriodInput):
    """Lumpsum followed by withdrawals escalated every year."""

    variant: Literal["step_up_swp"] = "step_up_swp"
    initial_investment: float = Field(gt=0)
    initial_monthly_withdrawal: float = Field(gt=0)
    step_up_percent: float = Field(ge=0)
    frequency: WithdrawalFrequency = WithdrawalFrequency.monthly


SimulationInput = Annotated[
    Union[LumpsumInput, SipInput, StepUpSipInput, SwpInput, StepUpSwpInput],
    Field(discriminator="variant"),
]


class RollingReturnInput(BaseModel):
    """Input for rolling return analysis."""

    window_years: int = Field(gt=0)
    inception_date: Optional[date] = None


# =============================================================================
# RESULTS
# =============================================================================


class GrowthPointResult(BaseModel):
    date: date
    value: float
    cumulative_investment: Optional[float] = None


class SimulationResult(BaseModel):
    """Result of a lumpsum, SIP or SWP simulation."""

    variant: str
    total_invested: float
    current_value: float
    absolute_return_pct: float
    annualized_return_pct: float
    total_units: float
    total_withdrawn: Optional[float] = None
    corpus_ran_out_date: Optional[date] = None
    start_nav_date: Optional[date] = None
    end_nav_date: Optional[date] = None
    growth_over_time: List[GrowthPointResult] = []

    @classmethod
    def from_outcome(cls, outcome: SimulationOutcome, decimals: int = 2) -> "SimulationResult":
        def money(value: Optional[float]) -> Optional[float]:
            return None if value is None else round(value, decimals)

        return cls(
            variant=outcome.variant.value,
            total_invested=money(outcome.total_invested),
            current_value=money(outcome.final_value),
            absolute_return_pct=round(outcome.absolute_return * 100, decimals),
            annualized_return_pct=round(outcome.annualized_return * 100, decimals),
            total_units=outcome.total_units,
            total_withdrawn=money(outcome.total_withdrawn),
            corpus_ran_out_date=outcome.corpus_ran_out_date,
            start_nav_date=outcome.start_nav_date,
            end_nav_date=outcome.end_nav_date,
            growth_over_time=[
                GrowthPointResult(
                    date=point.date,
                    value=money(point.value),
                    cumulative_investment=money(point.cumulative_investment),
                )
                for point in outcome.growth
            ],
        )


class RollingReturnPoint(BaseModel):
    window_start_date: date
    window_end_date: date
    annualized_return_pct: float


class RollingReturnResult(BaseModel):
    """Rolling return samples and their distribution (all in percent)."""

    window_years: int
    points: List[RollingReturnPoint] = []
    average: float = 0.0
    min: float = 0.0
    max: float = 0.0
    standard_deviation: float = 0.0

    @classmethod
    def from_rolling(cls, rolling: RollingReturns, decimals: int = 2) -> "RollingReturnResult":
        def pct(value: float) -> float:
            return round(value * 100, decimals)

        return cls(
            window_years=rolling.window_years,
            points=[
                RollingReturnPoint(
                    window_start_date=sample.window_start,
                    window_end_date=sample.window_end,
                    annualized_return_pct=pct(sample.annualized_return),
                )
                for sample in rolling.samples
            ],
            average=pct(rolling.average),
            min=pct(rolling.minimum),
            max=pct(rolling.maximum),
            standard_deviation=pct(rolling.standard_deviation),
        )


class TrailingReturnResult(BaseModel):
    """Point-to-point return for a trailing period."""

    period: str
    start_date: date
    end_date: date
    start_nav: float
    end_nav: float
    simple_return_pct: float
    annualized_return_pct: Optional[float] = None
    duration_days: int

    @classmethod
    def from_return(cls, result: PointToPointReturn, decimals: int = 2) -> "TrailingReturnResult":
        annualized = result.annualized_return
        return cls(
            period=result.period,
            start_date=result.start_date,
            end_date=result.end_date,
            start_nav=result.start_nav,
            end_nav=result.end_nav,
            simple_return_pct=round(result.simple_return * 100, decimals),
            annualized_return_pct=None if annualized is None else round(annualized * 100, decimals),
            duration_days=result.duration_days,
        )
