#!/usr/bin/env python3
"""
Run a returns calculation against a NAV history file.

Usage:
    python scripts/run_simulation.py nav.json simulate '{"variant": "sip", "amount": 5000, "from": "2020-01-01", "to": "2023-01-01"}'
    python scripts/run_simulation.py nav.json rolling 3
    python scripts/run_simulation.py nav.json trailing [YYYY-MM-DD]

The NAV file is either a list of {"date": "DD-MM-YYYY", "nav": "12.34"}
entries or the provider response object with those entries under "data".
"""

import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import logging
from datetime import date

from pydantic import ValidationError

from navreturns.calculations.nav import InsufficientNavDataError
from navreturns.config import get_settings
from navreturns.engine import analyze_rolling_returns, compute_trailing_returns, simulate


def load_nav_file(path: str) -> list:
    """Read NAV entries from a JSON file."""
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        return payload.get("data", [])
    return payload


def main(argv: list) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if len(argv) < 2:
        print(__doc__)
        return 1

    nav_entries = load_nav_file(argv[0])
    command = argv[1]

    try:
        if command == "simulate" and len(argv) == 3:
            result = simulate(nav_entries, json.loads(argv[2]))
            output = result.model_dump(mode="json")
        elif command == "rolling" and len(argv) == 3:
            result = analyze_rolling_returns(nav_entries, {"window_years": int(argv[2])})
            output = result.model_dump(mode="json")
        elif command == "trailing":
            as_of = date.fromisoformat(argv[2]) if len(argv) > 2 else None
            output = [r.model_dump(mode="json") for r in compute_trailing_returns(nav_entries, as_of)]
        else:
            print(__doc__)
            return 1
    except ValidationError as e:
        print(f"Error: invalid parameters\n{e}")
        return 2
    except InsufficientNavDataError as e:
        print(f"Error: {e}")
        return 3

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
