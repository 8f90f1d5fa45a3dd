"""Snapshot pipeline: fetch from Sleeper, derive position ranks, record the week."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Mapping, Optional, Protocol

from ffrank.config import Settings, resolve_week, validate_period
from ffrank.ingest import UpstreamError
from ffrank.models import RankingMode, SleeperPlayer, SleeperProjection, SleeperStats
from ffrank.persistence import SnapshotStore, StoreError
from ffrank.ranking import derive_ranking, select_mode


logger = logging.getLogger(__name__)


class ProviderClient(Protocol):
    def fetch_all_players(self) -> Mapping[str, SleeperPlayer]: ...

    def fetch_projections(self, season: int, week: int) -> Mapping[str, SleeperProjection]: ...

    def fetch_stats(self, season: int, week: int) -> Mapping[str, SleeperStats]: ...


@dataclass(frozen=True)
class SnapshotResult:
    season: int
    week: int
    mode: RankingMode
    upserted_players: int
    inserted_snapshots: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "season": self.season,
            "week": self.week,
            "mode": self.mode.value,
            "upserted_players": self.upserted_players,
            "inserted_snapshots": self.inserted_snapshots,
        }


def run_snapshot(
    client: ProviderClient,
    store: SnapshotStore,
    season: Optional[int] = None,
    week: Optional[int] = None,
    *,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> SnapshotResult:
    """Record one week of position ranks.

    ``season``/``week`` default to the period resolved from ``now``. Callers
    must not run this concurrently against the same store. Fetch failures
    abort before anything is written; store failures can leave player upserts
    applied but never a snapshot without its player. A week outside 1-18
    raises ValueError before anything is fetched.
    """

    settings = settings or Settings.from_env()
    if season is None or week is None:
        default = resolve_week(now, settings.season_start)
        season = default.season if season is None else season
        week = default.week if week is None else week
    season, week = validate_period(season, week)

    logger.info("Snapshot run starting for %s week %s", season, week)
    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            players_future = pool.submit(client.fetch_all_players)
            projections_future = pool.submit(client.fetch_projections, season, week)
            players = players_future.result()
            projections = projections_future.result()

        mode = select_mode(projections, settings.scoring)
        stats = None
        if mode is RankingMode.STATS_FALLBACK:
            logger.info("No projections for %s week %s; falling back to actual stats", season, week)
            stats = client.fetch_stats(season, week)
    except UpstreamError:
        logger.exception("Snapshot run for %s week %s aborted while fetching", season, week)
        raise

    ranking = derive_ranking(
        season=season,
        week=week,
        players=players,
        mode=mode,
        projections=projections,
        stats=stats,
        scoring=settings.scoring,
    )

    try:
        persisted = store.persist_ranking(ranking)
    except StoreError:
        logger.exception("Snapshot run for %s week %s failed while writing", season, week)
        raise

    result = SnapshotResult(
        season=season,
        week=week,
        mode=mode,
        upserted_players=persisted.upserted_players,
        inserted_snapshots=persisted.inserted_snapshots,
    )
    logger.info(
        "Snapshot run for %s week %s complete: %s players upserted, %s snapshots inserted",
        season,
        week,
        result.upserted_players,
        result.inserted_snapshots,
    )
    return result
