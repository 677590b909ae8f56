"""
NAV Returns Calculation Engine

Core calculation modules for mutual fund investment simulation.
All functions are pure and operate on an immutable NavSeries.
"""

from navreturns.calculations import dates, nav, returns, growth, simulators, rolling

__all__ = ["dates", "nav", "returns", "growth", "simulators", "rolling"]
