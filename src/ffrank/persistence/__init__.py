"""SQLite-backed store for players and their weekly rank snapshots."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from ffrank.models import Player, Position, RankedEntry, Ranking, SeasonWeek


logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the snapshot database cannot be read or written."""


@dataclass
class RankingRow:
    player_id: str
    name: str
    position: str
    team: Optional[str]
    season: int
    week: int
    rank: int
    projected_pts: Optional[float]


@dataclass
class HistoryPoint:
    season: int
    week: int
    rank: int
    projected_pts: Optional[float]


@dataclass(frozen=True)
class PersistResult:
    upserted_players: int
    inserted_snapshots: int


_UPSERT_PLAYER_SQL = """
    INSERT INTO players (player_id, name, position, team)
    VALUES (?, ?, ?, ?)
    ON CONFLICT(player_id) DO UPDATE SET
        name = excluded.name,
        position = excluded.position,
        team = excluded.team
"""

_INSERT_SNAPSHOT_SQL = """
    INSERT INTO snapshots (player_id, season, week, rank, projected_pts)
    VALUES (?, ?, ?, ?, ?)
    ON CONFLICT(player_id, season, week) DO NOTHING
"""


class SnapshotStore:
    """Players are last-write-wins; a snapshot row is written once and never touched again."""

    def __init__(self, db_path: Path | str):
        self._use_uri = isinstance(db_path, str) and db_path.startswith("file:")
        self.db_path: Path | str = db_path if self._use_uri else Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """One connection, one transaction; sqlite errors surface as :class:`StoreError`."""

        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as exc:
            raise StoreError(f"cannot open database {self.db_path}: {exc}") from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._session() as conn:
            # WAL lets readers keep serving committed rows while a snapshot run writes.
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS players (
                    player_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    position TEXT NOT NULL,
                    team TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS snapshots (
                    player_id TEXT NOT NULL,
                    season INTEGER NOT NULL,
                    week INTEGER NOT NULL,
                    rank INTEGER NOT NULL CHECK (rank >= 1),
                    projected_pts REAL,
                    PRIMARY KEY (player_id, season, week),
                    FOREIGN KEY (player_id) REFERENCES players (player_id)
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_snapshots_period ON snapshots (season, week)"
            )

    # -- writes -----------------------------------------------------------

    def upsert_player(self, player: Player) -> None:
        self.upsert_players([player])

    def upsert_players(self, players: Iterable[Player]) -> int:
        rows = [(p.player_id, p.name, p.position.value, p.team) for p in players]
        if not rows:
            return 0
        with self._session() as conn:
            conn.executemany(_UPSERT_PLAYER_SQL, rows)
        return len(rows)

    def record_snapshot(
        self,
        player_id: str,
        season: int,
        week: int,
        rank: int,
        points: Optional[float],
    ) -> bool:
        """Insert one snapshot; returns ``False`` when the period was already recorded."""

        with self._session() as conn:
            cur = conn.execute(_INSERT_SNAPSHOT_SQL, (player_id, season, week, rank, points))
            return cur.rowcount == 1

    def record_snapshots(self, entries: Iterable[RankedEntry], season: int, week: int) -> int:
        rows = [(e.player_id, season, week, e.rank, e.points) for e in entries]
        if not rows:
            return 0
        with self._session() as conn:
            before = conn.total_changes
            conn.executemany(_INSERT_SNAPSHOT_SQL, rows)
            inserted = conn.total_changes - before
        return inserted

    def persist_ranking(self, ranking: Ranking) -> PersistResult:
        """Write players then snapshots, as two separate commits in that order."""

        upserted = self.upsert_players(ranking.players.values())
        inserted = self.record_snapshots(ranking.entries(), ranking.season, ranking.week)
        skipped = len(ranking.entries()) - inserted
        if skipped:
            logger.info(
                "%s snapshots for %s week %s already recorded; left unchanged",
                skipped,
                ranking.season,
                ranking.week,
            )
        return PersistResult(upserted_players=upserted, inserted_snapshots=inserted)

    # -- reads ------------------------------------------------------------

    def get_player(self, player_id: str) -> Optional[Player]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT player_id, name, position, team FROM players WHERE player_id = ?",
                (player_id,),
            ).fetchone()
        if row is None:
            return None
        return Player(
            player_id=row["player_id"],
            name=row["name"],
            position=Position(row["position"]),
            team=row["team"],
        )

    def latest_period(self) -> Optional[SeasonWeek]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT season, week FROM snapshots ORDER BY season DESC, week DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        return SeasonWeek(row["season"], row["week"])

    def period_ranking(
        self,
        season: int,
        week: int,
        *,
        position: str | None = None,
        team: str | None = None,
    ) -> List[RankingRow]:
        query = """
            SELECT p.player_id, p.name, p.position, p.team,
                   s.season, s.week, s.rank, s.projected_pts
            FROM snapshots s
            JOIN players p ON p.player_id = s.player_id
            WHERE s.season = ? AND s.week = ?
        """
        params: list[str | int] = [season, week]
        if position:
            query += " AND p.position = ?"
            params.append(position)
        if team:
            query += " AND p.team = ?"
            params.append(team)
        query += " ORDER BY p.position, s.rank ASC"
        with self._session() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_ranking(row) for row in rows]

    def period_ranks(self, season: int, week: int) -> Dict[str, int]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT player_id, rank FROM snapshots WHERE season = ? AND week = ?",
                (season, week),
            ).fetchall()
        return {row["player_id"]: row["rank"] for row in rows}

    def player_history(self, player_id: str) -> List[HistoryPoint]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT season, week, rank, projected_pts
                FROM snapshots
                WHERE player_id = ?
                ORDER BY season ASC, week ASC
                """,
                (player_id,),
            ).fetchall()
        return [
            HistoryPoint(
                season=row["season"],
                week=row["week"],
                rank=row["rank"],
                projected_pts=row["projected_pts"],
            )
            for row in rows
        ]

    def _row_to_ranking(self, row: sqlite3.Row) -> RankingRow:
        return RankingRow(
            player_id=row["player_id"],
            name=row["name"],
            position=row["position"],
            team=row["team"],
            season=row["season"],
            week=row["week"],
            rank=row["rank"],
            projected_pts=row["projected_pts"],
        )
