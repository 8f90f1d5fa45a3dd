"""Week-over-week rank movement for the latest recorded period."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from ffrank.config.season import previous_period
from ffrank.persistence import RankingRow, SnapshotStore


@dataclass
class TrendRow:
    player_id: str
    name: str
    position: str
    team: Optional[str]
    season: int
    week: int
    rank: int
    projected_pts: Optional[float]
    rank_change: Optional[int]


def rank_delta(previous: Optional[int], current: int) -> Optional[int]:
    """Positive when the player moved toward rank 1, negative when they fell."""

    if previous is None:
        return None
    return previous - current


def apply_trends(rows: Iterable[RankingRow], previous_ranks: Mapping[str, int]) -> List[TrendRow]:
    return [
        TrendRow(
            player_id=row.player_id,
            name=row.name,
            position=row.position,
            team=row.team,
            season=row.season,
            week=row.week,
            rank=row.rank,
            projected_pts=row.projected_pts,
            rank_change=rank_delta(previous_ranks.get(row.player_id), row.rank),
        )
        for row in rows
    ]


def normalize_team(team: str | None) -> str | None:
    """Team abbreviations are stored upper-case; blank means no filter."""

    if not team or not team.strip():
        return None
    return team.strip().upper()


def current_rankings(
    store: SnapshotStore,
    *,
    position: str | None = None,
    team: str | None = None,
) -> List[TrendRow]:
    latest = store.latest_period()
    if latest is None:
        return []
    rows = store.period_ranking(latest.season, latest.week, position=position, team=normalize_team(team))
    prior = previous_period(latest.season, latest.week)
    return apply_trends(rows, store.period_ranks(prior.season, prior.week))
