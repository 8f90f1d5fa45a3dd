import sqlite3

import pytest

from ffrank.models import Player, Position, RankedEntry, Ranking, RankingMode
from ffrank.persistence import SnapshotStore, StoreError


def _player(player_id: str, position: Position = Position.RB, team: str | None = "KC") -> Player:
    return Player(player_id=player_id, name=f"Player {player_id}", position=position, team=team)


def test_upsert_player_is_last_write_wins(store: SnapshotStore):
    store.upsert_player(_player("p1", team="KC"))
    store.upsert_player(Player(player_id="p1", name="Renamed", position=Position.WR, team="BUF"))

    player = store.get_player("p1")
    assert player is not None
    assert player.team == "BUF"
    assert player.name == "Renamed"
    assert player.position is Position.WR


def test_upsert_player_can_clear_team(store: SnapshotStore):
    store.upsert_player(_player("p1", team="KC"))
    store.upsert_player(_player("p1", team=None))

    assert store.get_player("p1").team is None


def test_record_snapshot_inserts_once(store: SnapshotStore):
    store.upsert_player(_player("p1"))

    assert store.record_snapshot("p1", 2025, 5, 3, 17.5) is True
    assert store.record_snapshot("p1", 2025, 5, 9, 4.0) is False

    history = store.player_history("p1")
    assert [(h.rank, h.projected_pts) for h in history] == [(3, 17.5)]


def test_record_snapshot_requires_existing_player(store: SnapshotStore):
    with pytest.raises(StoreError):
        store.record_snapshot("missing", 2025, 5, 1, 10.0)
    assert store.latest_period() is None


def test_record_snapshots_counts_only_new_rows(store: SnapshotStore):
    store.upsert_players([_player("a"), _player("b")])
    entries = [
        RankedEntry(player_id="a", position=Position.RB, rank=1, points=20.0),
        RankedEntry(player_id="b", position=Position.RB, rank=2, points=None),
    ]

    assert store.record_snapshots(entries, 2025, 5) == 2
    assert store.record_snapshots(entries, 2025, 5) == 0
    assert store.record_snapshots([], 2025, 6) == 0


def test_latest_period_orders_by_season_then_week(store: SnapshotStore):
    assert store.latest_period() is None
    store.upsert_player(_player("p1"))
    for season, week in [(2024, 18), (2025, 2), (2025, 1), (2024, 17)]:
        store.record_snapshot("p1", season, week, 1, None)

    assert store.latest_period() == (2025, 2)


def test_period_ranking_orders_and_filters(store: SnapshotStore):
    store.upsert_players(
        [
            _player("rb2", Position.RB, "KC"),
            _player("wr1", Position.WR, "BUF"),
            _player("rb1", Position.RB, "BUF"),
            _player("qb1", Position.QB, None),
        ]
    )
    store.record_snapshot("rb2", 2025, 5, 2, 15.0)
    store.record_snapshot("wr1", 2025, 5, 1, 20.0)
    store.record_snapshot("rb1", 2025, 5, 1, 20.0)
    store.record_snapshot("qb1", 2025, 5, 1, 25.0)
    store.record_snapshot("rb1", 2025, 4, 7, 9.0)

    rows = store.period_ranking(2025, 5)
    assert [(r.position, r.rank, r.player_id) for r in rows] == [
        ("QB", 1, "qb1"),
        ("RB", 1, "rb1"),
        ("RB", 2, "rb2"),
        ("WR", 1, "wr1"),
    ]
    assert [r.player_id for r in store.period_ranking(2025, 5, position="RB")] == ["rb1", "rb2"]
    assert [r.player_id for r in store.period_ranking(2025, 5, team="BUF")] == ["rb1", "wr1"]
    assert store.period_ranking(2025, 5, position="TE") == []
    assert store.period_ranks(2025, 4) == {"rb1": 7}


def test_player_history_is_chronological(store: SnapshotStore):
    store.upsert_player(_player("p1"))
    store.record_snapshot("p1", 2025, 2, 4, 12.0)
    store.record_snapshot("p1", 2024, 18, 9, None)
    store.record_snapshot("p1", 2025, 1, 6, 11.0)

    history = store.player_history("p1")

    assert [(h.season, h.week, h.rank) for h in history] == [(2024, 18, 9), (2025, 1, 6), (2025, 2, 4)]
    assert store.player_history("nobody") == []


def test_persist_ranking_writes_players_before_snapshots(store: SnapshotStore):
    ranking = Ranking(
        season=2025,
        week=5,
        mode=RankingMode.PROJECTIONS,
        by_position={Position.K: [RankedEntry(player_id="k1", position=Position.K, rank=1, points=9.0)]},
        players={"k1": _player("k1", Position.K)},
    )

    first = store.persist_ranking(ranking)
    second = store.persist_ranking(ranking)

    assert (first.upserted_players, first.inserted_snapshots) == (1, 1)
    assert (second.upserted_players, second.inserted_snapshots) == (1, 0)


def test_snapshot_rows_cannot_be_orphaned(store: SnapshotStore):
    store.upsert_player(_player("p1"))
    store.record_snapshot("p1", 2025, 5, 1, None)

    conn = sqlite3.connect(store.db_path)
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("DELETE FROM players WHERE player_id = 'p1'")
    finally:
        conn.close()


def test_unwritable_db_directory_raises_store_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(StoreError):
        SnapshotStore(blocker / "nested" / "ffrank.sqlite")
