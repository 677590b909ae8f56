"""
NAV-based investment returns engine.
"""

__version__ = "0.1.0"
