"""
NAV Series and Date Resolution

Normalizes raw (date, nav) observations into an immutable, chronologically
ordered series and resolves the NAV that applies on a given date.
"""

import logging
import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%d-%m-%Y"


class InsufficientNavDataError(ValueError):
    """Raised when no NAV can be resolved for an anchor date of a calculation."""

    def __init__(self, message: str, target_date: Optional[date] = None):
        super().__init__(message)
        self.target_date = target_date


@dataclass(frozen=True)
class NavPoint:
    """A single NAV observation."""

    date: date
    nav: float


class NavSeries:
    """
    Immutable NAV observations sorted ascending by date.

    Duplicate dates are kept in the order they were supplied.
    """

    __slots__ = ("_points", "_dates")

    def __init__(self, points: Iterable[NavPoint] = ()):
        self._points: Tuple[NavPoint, ...] = tuple(sorted(points, key=lambda p: p.date))
        self._dates: Tuple[date, ...] = tuple(p.date for p in self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[NavPoint]:
        return iter(self._points)

    def __getitem__(self, index):
        return self._points[index]

    def __bool__(self) -> bool:
        return bool(self._points)

    def __repr__(self) -> str:
        if not self._points:
            return "NavSeries([])"
        return f"NavSeries({len(self)} points, {self._dates[0]} to {self._dates[-1]})"

    @property
    def first(self) -> Optional[NavPoint]:
        return self._points[0] if self._points else None

    @property
    def last(self) -> Optional[NavPoint]:
        return self._points[-1] if self._points else None

    def between(self, start_date: date, end_date: date) -> "NavSeries":
        """Observations with start_date <= date <= end_date."""
        lo = bisect_left(self._dates, start_date)
        hi = bisect_right(self._dates, end_date)
        return NavSeries(self._points[lo:hi])

    def since(self, start_date: date) -> "NavSeries":
        """Observations on or after start_date."""
        return NavSeries(self._points[bisect_left(self._dates, start_date):])

    def index_on_or_after(self, target: date) -> int:
        return bisect_left(self._dates, target)

    def index_on_or_before(self, target: date) -> int:
        return bisect_right(self._dates, target) - 1


def parse_nav_date(value: Any, date_format: str = DEFAULT_DATE_FORMAT) -> Optional[date]:
    """
    Parse a NAV date.

    Accepts ``date``/``datetime`` objects, strings in ``date_format``
    (DD-MM-YYYY by default) and ISO ``YYYY-MM-DD`` strings.

    Returns:
        Parsed date, or None if the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return datetime.strptime(text, date_format).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def parse_nav_value(value: Any) -> Optional[float]:
    """Parse a NAV value. Returns None for non-numeric, non-finite or non-positive input."""
    if isinstance(value, bool):
        return None
    try:
        nav = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(nav) or nav <= 0:
        return None
    return nav


def _entry_fields(entry: Any) -> Tuple[Any, Any]:
    if isinstance(entry, NavPoint):
        return entry.date, entry.nav
    if isinstance(entry, dict):
        return entry.get("date"), entry.get("nav")
    if hasattr(entry, "date") and hasattr(entry, "nav"):
        return entry.date, entry.nav
    try:
        raw_date, raw_nav = entry
    except (TypeError, ValueError):
        return None, None
    return raw_date, raw_nav


def parse_nav_series(
    entries: Iterable[Any], date_format: str = DEFAULT_DATE_FORMAT
) -> NavSeries:
    """
    Build a NavSeries from raw observations.

    Entries may be ``(date, nav)`` pairs, dicts with ``date``/``nav`` keys or
    objects exposing ``date``/``nav`` attributes. Entries with an unparsable
    date or a NAV that is non-numeric or <= 0 are dropped without error.
    The caller's collection is not modified.

    Args:
        entries: Raw NAV observations in any order
        date_format: strptime format for date strings (ISO is also accepted)

    Returns:
        New NavSeries sorted ascending by date
    """
    points: List[NavPoint] = []
    dropped = 0

    for entry in entries:
        raw_date, raw_nav = _entry_fields(entry)
        nav_date = parse_nav_date(raw_date, date_format)
        nav = parse_nav_value(raw_nav)
        if nav_date is None or nav is None:
            dropped += 1
            continue
        points.append(NavPoint(date=nav_date, nav=nav))

    if dropped:
        logger.debug(f"Dropped {dropped} invalid NAV entries, kept {len(points)}")

    return NavSeries(points)


def find_on_or_after(
    series: NavSeries, target: date, fallback_to_last: bool = True
) -> Optional[NavPoint]:
    """
    Resolve the first NAV observed on or after ``target``.

    When the target is after the last observation the last point is returned
    (flat extrapolation), unless ``fallback_to_last`` is False.

    Returns:
        Matching NavPoint, or None for an empty series
    """
    if not series:
        return None
    index = series.index_on_or_after(target)
    if index < len(series):
        return series[index]
    return series.last if fallback_to_last else None


def find_on_or_before(series: NavSeries, target: date) -> Optional[NavPoint]:
    """
    Resolve the last NAV observed on or before ``target``.

    Returns:
        Matching NavPoint, or None if the target precedes the first observation
    """
    index = series.index_on_or_before(target)
    if index < 0:
        return None
    return series[index]


def require_nav(point: Optional[NavPoint], target: date, label: str = "NAV") -> NavPoint:
    """Return ``point`` or raise InsufficientNavDataError if it was not resolved."""
    if point is None:
        raise InsufficientNavDataError(
            f"Insufficient data: no {label} available for {target.isoformat()}",
            target_date=target,
        )
    return point
