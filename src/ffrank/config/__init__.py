"""Configuration helpers for runtime settings and the NFL calendar."""

from .season import FIRST_WEEK, LAST_WEEK, SEASON_START, previous_period, resolve_week, validate_period
from .settings import Settings

__all__ = [
    "FIRST_WEEK",
    "LAST_WEEK",
    "SEASON_START",
    "Settings",
    "previous_period",
    "resolve_week",
    "validate_period",
]
