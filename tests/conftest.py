from __future__ import annotations

from pathlib import Path
from typing import Mapping

import pytest

from ffrank.ingest import UpstreamError
from ffrank.models import SleeperPlayer, SleeperProjection, SleeperStats
from ffrank.persistence import SnapshotStore


def make_player(player_id: str, position: str = "RB", *, team: str | None = "KC", active: bool = True, **extra) -> SleeperPlayer:
    data = {
        "player_id": player_id,
        "full_name": f"Player {player_id}",
        "position": position,
        "fantasy_positions": [position],
        "team": team,
        "active": active,
    }
    data.update(extra)
    return SleeperPlayer(**data)


class FakeSleeper:
    """In-memory stand-in for :class:`ffrank.ingest.SleeperClient`."""

    def __init__(
        self,
        players: Mapping[str, SleeperPlayer],
        projections: Mapping[str, SleeperProjection] | None = None,
        stats: Mapping[str, SleeperStats] | None = None,
        *,
        fail: str | None = None,
    ):
        self.players = dict(players)
        self.projections = dict(projections or {})
        self.stats = dict(stats or {})
        self.fail = fail
        self.calls: list[tuple] = []

    def fetch_all_players(self):
        self.calls.append(("players",))
        if self.fail == "players":
            raise UpstreamError("/players/nfl", "HTTP 503", status_code=503)
        return self.players

    def fetch_projections(self, season: int, week: int):
        self.calls.append(("projections", season, week))
        if self.fail == "projections":
            raise UpstreamError(f"/projections/nfl/{season}/{week}", "HTTP 500", status_code=500)
        return self.projections

    def fetch_stats(self, season: int, week: int):
        self.calls.append(("stats", season, week))
        if self.fail == "stats":
            raise UpstreamError(f"/stats/nfl/{season}/{week}", "HTTP 500", status_code=500)
        return self.stats


@pytest.fixture
def store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "ffrank.sqlite")


@pytest.fixture
def anyio_backend():
    return "asyncio"
