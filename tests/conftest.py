"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, timedelta

from navreturns.calculations.nav import NavPoint, NavSeries, parse_nav_series
from navreturns.config import get_settings


# Yearly NAVs where 12.10 / 10.00 = 1.1 ** 2
THREE_YEAR_ENTRIES = [
    {"date": "01-01-2020", "nav": "10.00"},
    {"date": "01-01-2021", "nav": "11.00"},
    {"date": "01-01-2022", "nav": "12.10"},
]


def make_daily_series(start, days, start_nav=10.0, daily_growth=0.0003):
    """NAV observed every calendar day, compounding at a constant daily rate."""
    return NavSeries(
        NavPoint(start + timedelta(days=i), start_nav * (1 + daily_growth) ** i)
        for i in range(days)
    )


@pytest.fixture
def three_year_entries():
    """Raw provider-style NAV entries (DD-MM-YYYY strings)."""
    return [dict(entry) for entry in THREE_YEAR_ENTRIES]


@pytest.fixture
def three_year_series(three_year_entries):
    return parse_nav_series(three_year_entries)


@pytest.fixture
def daily_series_factory():
    """Factory for constant-growth daily NAV series."""
    return make_daily_series


@pytest.fixture
def daily_series():
    """Four years of daily NAVs from 2020-01-01 growing 0.03% per day."""
    return make_daily_series(date(2020, 1, 1), 4 * 365 + 1)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test so env overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
