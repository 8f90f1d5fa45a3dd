"""Pydantic models for upstream payloads, players and derived rankings."""

from .player import (
    TRACKED_POSITIONS,
    Player,
    Position,
    RankedEntry,
    Ranking,
    RankingMode,
    ScoringFormat,
    SeasonWeek,
    SleeperPlayer,
    SleeperProjection,
    SleeperStats,
)

__all__ = [
    "TRACKED_POSITIONS",
    "Player",
    "Position",
    "RankedEntry",
    "Ranking",
    "RankingMode",
    "ScoringFormat",
    "SeasonWeek",
    "SleeperPlayer",
    "SleeperProjection",
    "SleeperStats",
]
