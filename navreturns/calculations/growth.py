"""
Growth Curve Builder

Time-indexed valuation points emitted by the simulators for charting.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterator, List, Optional


@dataclass(frozen=True)
class GrowthPoint:
    """Portfolio value on a date, optionally with the cumulative amount invested."""

    date: date
    value: float
    cumulative_investment: Optional[float] = None


class GrowthCurve:
    """Ordered growth points, appended in date order."""

    def __init__(self):
        self._points: List[GrowthPoint] = []

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GrowthPoint]:
        return iter(self._points)

    @property
    def last(self) -> Optional[GrowthPoint]:
        return self._points[-1] if self._points else None

    def add(
        self, point_date: date, value: float, cumulative_investment: Optional[float] = None
    ) -> GrowthPoint:
        if self._points and point_date < self._points[-1].date:
            raise ValueError(
                f"Growth point {point_date} precedes last point {self._points[-1].date}"
            )
        point = GrowthPoint(point_date, value, cumulative_investment)
        self._points.append(point)
        return point

    def revalue_last(
        self, value: float, cumulative_investment: Optional[float] = None
    ) -> None:
        """Replace the value (and investment, if given) of the most recent point."""
        if not self._points:
            return
        last = self._points[-1]
        if cumulative_investment is None:
            cumulative_investment = last.cumulative_investment
        self._points[-1] = replace(
            last, value=value, cumulative_investment=cumulative_investment
        )
