"""
Pytest configuration and shared fixtures for the PLI Santosh assistant tests.
"""
import pytest
from datetime import date
from typing import Any, Dict

from pli_assistant.services.highlight import HighlightTracker
from pli_assistant.services.policy_store import PolicyStore
from pli_assistant.services.rate_tables import RateTables

TODAY = date(2026, 10, 19)

# Birth dates giving whole-year ages on TODAY
DOB_AGE_30 = date(1996, 1, 15)
DOB_AGE_38 = date(1988, 1, 15)
DOB_AGE_60 = date(1966, 1, 15)


@pytest.fixture
def raw_rate_tables() -> Dict[str, Any]:
    """Small rate table document in the on-disk JSON shape."""
    return {
        "note": "test rates",
        "monthly": {
            "30": {"35": 80.0, "40": 44.0, "45": 30.0, "50": 23.0, "55": 20.0, "58": 17.0, "60": 16.0},
            "38": {"45": 60.0, "50": 35.0, "55": 25.0, "58": 22.0, "60": 20.5},
            "55": {"60": 90.0},
        },
        "half-yearly": {
            "30": {"55": 118.0, "60": 95.0},
        },
        "yearly": {
            "30": {"55": 232.0, "60": 186.0},
        },
    }


@pytest.fixture
def rate_tables(raw_rate_tables) -> RateTables:
    return RateTables.from_dict(raw_rate_tables)


@pytest.fixture
def store(rate_tables) -> PolicyStore:
    """Policy store pinned to a fixed calendar date."""
    return PolicyStore(rate_tables=rate_tables, bonus_rate=52.0, today=lambda: TODAY)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def highlights(clock) -> HighlightTracker:
    return HighlightTracker(duration_seconds=3.0, clock=clock)
