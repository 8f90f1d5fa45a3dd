"""Canonical player and ranking models shared across ingestion, ranking and storage."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, NamedTuple, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Position(str, Enum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"


TRACKED_POSITIONS: tuple[Position, ...] = tuple(Position)


class ScoringFormat(str, Enum):
    """Sleeper scoring variants; each maps to a points field and a position-rank field."""

    PPR = "ppr"
    HALF_PPR = "half_ppr"
    STD = "std"

    @property
    def points_field(self) -> str:
        return f"pts_{self.value}"

    @property
    def rank_field(self) -> str:
        return f"pos_rank_{self.value}"


class RankingMode(str, Enum):
    PROJECTIONS = "projections"
    STATS_FALLBACK = "stats"


class SeasonWeek(NamedTuple):
    season: int
    week: int


class SleeperPlayer(BaseModel):
    """Directory entry from ``/players/nfl``; only the fields used for ranking are kept."""

    player_id: Optional[str] = None
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    fantasy_positions: Optional[List[str]] = None
    team: Optional[str] = None
    active: Optional[bool] = None

    model_config = ConfigDict(extra="ignore", frozen=True)


class SleeperProjection(BaseModel):
    pts_ppr: Optional[float] = None
    pts_half_ppr: Optional[float] = None
    pts_std: Optional[float] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    def points(self, scoring: ScoringFormat = ScoringFormat.PPR) -> Optional[float]:
        return getattr(self, scoring.points_field)


class SleeperStats(BaseModel):
    pts_ppr: Optional[float] = None
    pts_half_ppr: Optional[float] = None
    pts_std: Optional[float] = None
    pos_rank_ppr: Optional[int] = None
    pos_rank_half_ppr: Optional[int] = None
    pos_rank_std: Optional[int] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    def points(self, scoring: ScoringFormat = ScoringFormat.PPR) -> Optional[float]:
        return getattr(self, scoring.points_field)

    def position_rank(self, scoring: ScoringFormat = ScoringFormat.PPR) -> Optional[int]:
        return getattr(self, scoring.rank_field)


class Player(BaseModel):
    """Persisted player identity; ``team`` is ``None`` for free agents."""

    player_id: str = Field(..., min_length=1)
    name: str
    position: Position
    team: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class RankedEntry(BaseModel):
    player_id: str = Field(..., min_length=1)
    position: Position
    rank: int = Field(..., ge=1)
    points: Optional[float] = None

    model_config = ConfigDict(frozen=True)


class Ranking(BaseModel):
    """Output of one derivation run: entries grouped by position plus the players they reference."""

    season: int
    week: int = Field(..., ge=1)
    mode: RankingMode
    by_position: Dict[Position, List[RankedEntry]]
    players: Dict[str, Player]

    model_config = ConfigDict(frozen=True)

    def entries(self) -> List[RankedEntry]:
        return [entry for position in TRACKED_POSITIONS for entry in self.by_position.get(position, [])]
