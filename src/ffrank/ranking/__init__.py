"""Rank derivation and trend projection."""

from .derive import (
    derive_ranking,
    display_name,
    rank_projections,
    rank_stats,
    resolve_position,
    select_mode,
)
from .trends import TrendRow, apply_trends, current_rankings, normalize_team, rank_delta

__all__ = [
    "TrendRow",
    "apply_trends",
    "current_rankings",
    "derive_ranking",
    "display_name",
    "normalize_team",
    "rank_delta",
    "rank_projections",
    "rank_stats",
    "resolve_position",
    "select_mode",
]
