from __future__ import annotations

from pydantic import BaseModel


class RankingRowResponse(BaseModel):
    player_id: str
    name: str
    position: str
    team: str | None
    rank: int
    rank_change: int | None
    projected_pts: float | None
    week: int
    season: int


class HistoryRowResponse(BaseModel):
    season: int
    week: int
    rank: int
    projected_pts: float | None
