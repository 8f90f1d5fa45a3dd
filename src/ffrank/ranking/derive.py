"""Derive dense per-position ranks from Sleeper projections or actual stats."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from ffrank.models import (
    TRACKED_POSITIONS,
    Player,
    Position,
    RankedEntry,
    Ranking,
    RankingMode,
    ScoringFormat,
    SleeperPlayer,
    SleeperProjection,
    SleeperStats,
)


logger = logging.getLogger(__name__)

PositionGroups = Dict[Position, List[RankedEntry]]

_TRACKED_LOOKUP = {position.value: position for position in TRACKED_POSITIONS}


def resolve_position(
    fantasy_positions: Optional[Sequence[str]],
    position: Optional[str],
) -> Optional[Position]:
    """Pick the first declared fantasy position, else the primary one.

    Returns ``None`` when the chosen token is not a tracked position; such
    players are unranked and never stored.
    """

    token = fantasy_positions[0] if fantasy_positions else position
    if not token:
        return None
    return _TRACKED_LOOKUP.get(token.strip().upper())


def display_name(player_id: str, player: SleeperPlayer) -> str:
    if player.full_name:
        return player.full_name
    joined = f"{player.first_name or ''} {player.last_name or ''}".strip()
    return joined or player_id


def _empty_groups() -> PositionGroups:
    return {position: [] for position in TRACKED_POSITIONS}


def select_mode(
    projections: Mapping[str, SleeperProjection],
    scoring: ScoringFormat = ScoringFormat.PPR,
) -> RankingMode:
    """Projections win unless every projected value is missing or zero."""

    for projection in projections.values():
        points = projection.points(scoring)
        if points is not None and points > 0:
            return RankingMode.PROJECTIONS
    return RankingMode.STATS_FALLBACK


def rank_projections(
    players: Mapping[str, SleeperPlayer],
    projections: Mapping[str, SleeperProjection],
    scoring: ScoringFormat = ScoringFormat.PPR,
) -> PositionGroups:
    candidates: Dict[Position, List[tuple[str, float]]] = {position: [] for position in TRACKED_POSITIONS}
    for player_id, projection in projections.items():
        player = players.get(player_id)
        if player is None:
            continue
        position = resolve_position(player.fantasy_positions, player.position)
        if position is None or not player.active:
            continue
        points = projection.points(scoring) or 0.0
        if points <= 0:
            continue
        candidates[position].append((player_id, points))

    groups = _empty_groups()
    for position, entries in candidates.items():
        # Equal projections fall back to player id so reruns rank identically.
        ordered = sorted(entries, key=lambda item: (-item[1], item[0]))
        groups[position] = [
            RankedEntry(player_id=player_id, position=position, rank=index, points=points)
            for index, (player_id, points) in enumerate(ordered, start=1)
        ]
    return groups


def rank_stats(
    players: Mapping[str, SleeperPlayer],
    stats: Mapping[str, SleeperStats],
    scoring: ScoringFormat = ScoringFormat.PPR,
) -> PositionGroups:
    """Carry Sleeper's own position ranks through unchanged."""

    groups = _empty_groups()
    for player_id, stat in stats.items():
        rank = stat.position_rank(scoring)
        if not rank or rank <= 0:
            continue
        player = players.get(player_id)
        if player is None:
            continue
        position = resolve_position(player.fantasy_positions, player.position)
        if position is None:
            continue
        groups[position].append(
            RankedEntry(player_id=player_id, position=position, rank=rank, points=stat.points(scoring))
        )
    for entries in groups.values():
        entries.sort(key=lambda entry: (entry.rank, entry.player_id))
    return groups


def derive_ranking(
    *,
    season: int,
    week: int,
    players: Mapping[str, SleeperPlayer],
    mode: RankingMode,
    projections: Mapping[str, SleeperProjection] | None = None,
    stats: Mapping[str, SleeperStats] | None = None,
    scoring: ScoringFormat = ScoringFormat.PPR,
) -> Ranking:
    if mode is RankingMode.PROJECTIONS:
        if projections is None:
            raise ValueError("projections are required in projections mode")
        groups = rank_projections(players, projections, scoring)
    else:
        if stats is None:
            raise ValueError("stats are required in stats fallback mode")
        groups = rank_stats(players, stats, scoring)

    resolved: Dict[str, Player] = {}
    for position, entries in groups.items():
        for entry in entries:
            raw = players[entry.player_id]
            resolved[entry.player_id] = Player(
                player_id=entry.player_id,
                name=display_name(entry.player_id, raw),
                position=position,
                team=raw.team or None,
            )

    logger.info(
        "Derived %s ranking for %s week %s: %s",
        mode.value,
        season,
        week,
        ", ".join(f"{position.value}={len(groups[position])}" for position in TRACKED_POSITIONS),
    )
    return Ranking(season=season, week=week, mode=mode, by_position=groups, players=resolved)
