"""Command-line interface for recording and inspecting weekly rank snapshots."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, replace
from pathlib import Path
from typing import Sequence

from ffrank.config import FIRST_WEEK, LAST_WEEK, Settings, resolve_week
from ffrank.ingest import SleeperClient, UpstreamError
from ffrank.models import TRACKED_POSITIONS
from ffrank.persistence import SnapshotStore, StoreError
from ffrank.pipeline import run_snapshot
from ffrank.ranking import current_rankings


def _week(value: str) -> int:
    week = int(value)
    if not FIRST_WEEK <= week <= LAST_WEEK:
        raise argparse.ArgumentTypeError(f"week must be between {FIRST_WEEK} and {LAST_WEEK}")
    return week


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track weekly fantasy position ranks from Sleeper")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path (overrides FFRANK_DB_PATH)")
    parser.add_argument("--settings", type=Path, default=None, help="Load settings from a JSON profile")
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    snapshot = sub.add_parser("snapshot", help="Fetch Sleeper data and record one week of ranks")
    snapshot.add_argument("--season", type=int, default=None, help="Season year (defaults to current)")
    snapshot.add_argument("--week", type=_week, default=None, help="Week 1-18 (defaults to current)")

    rankings = sub.add_parser("rankings", help="Show the latest recorded ranks with weekly movement")
    rankings.add_argument(
        "--position",
        choices=[position.value for position in TRACKED_POSITIONS],
        default=None,
        help="Restrict to one position",
    )
    rankings.add_argument("--team", default=None, help="Restrict to one team abbreviation")

    history = sub.add_parser("history", help="Show every recorded rank for a player")
    history.add_argument("player_id", help="Sleeper player id")

    sub.add_parser("week", help="Print the season/week used when none is given")
    return parser.parse_args(argv)


def _load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.load(args.settings) if args.settings else Settings.from_env()
    if args.db:
        settings = replace(settings, db_path=str(args.db))
    return settings


def _format_change(change: int | None) -> str:
    if change is None:
        return "-"
    if change > 0:
        return f"+{change}"
    return str(change)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = _load_settings(args)

    if args.command == "week":
        current = resolve_week(season_start=settings.season_start)
        if args.json:
            print(json.dumps(current._asdict()))
        else:
            print(f"Season {current.season}, week {current.week}")
        return

    try:
        store = SnapshotStore(settings.db_path)
        if args.command == "snapshot":
            with SleeperClient(settings.sleeper_base_url, timeout=settings.http_timeout) as client:
                result = run_snapshot(client, store, args.season, args.week, settings=settings)
            if args.json:
                print(json.dumps(result.to_dict(), indent=2))
            else:
                print(
                    f"Recorded {result.season} week {result.week} from {result.mode.value}: "
                    f"{result.upserted_players} players upserted, {result.inserted_snapshots} snapshots inserted"
                )
        elif args.command == "rankings":
            rows = current_rankings(store, position=args.position, team=args.team)
            if args.json:
                print(json.dumps([asdict(row) for row in rows], indent=2))
            elif not rows:
                print("No snapshots recorded yet")
            else:
                print(f"Season {rows[0].season}, week {rows[0].week}")
                for row in rows:
                    pts = "-" if row.projected_pts is None else f"{row.projected_pts:.1f}"
                    print(
                        f"{row.position:<3} {row.rank:>3}  {row.name:<28} {row.team or 'FA':<4} "
                        f"{pts:>6}  {_format_change(row.rank_change):>4}"
                    )
        elif args.command == "history":
            points = store.player_history(args.player_id)
            if args.json:
                print(json.dumps([asdict(point) for point in points], indent=2))
            elif not points:
                print(f"No snapshots recorded for player {args.player_id}")
            else:
                for point in points:
                    pts = "-" if point.projected_pts is None else f"{point.projected_pts:.1f}"
                    print(f"{point.season} wk{point.week:>2}  rank {point.rank:>3}  {pts:>6}")
    except (UpstreamError, StoreError, ValueError) as exc:
        raise SystemExit(f"ffrank {args.command} failed: {exc}") from exc


if __name__ == "__main__":
    main()
