"""NFL calendar helpers: default season/week resolution and period rollback."""

from __future__ import annotations

from datetime import datetime, timezone

from ffrank.models import SeasonWeek


# Week 1 of the 2025 regular season kicks off Thursday, September 4.
SEASON_START = datetime(2025, 9, 4, tzinfo=timezone.utc)
FIRST_WEEK = 1
LAST_WEEK = 18


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_week(now: datetime | None = None, season_start: datetime = SEASON_START) -> SeasonWeek:
    """Return the season/week in play at ``now``.

    Before ``season_start`` the final week of the prior season is returned so
    offseason callers still land on the most recent complete period.
    """

    now = _as_utc(now or datetime.now(timezone.utc))
    start = _as_utc(season_start)
    if now < start:
        return SeasonWeek(start.year - 1, LAST_WEEK)
    days_since_start = (now - start).days
    week = min(max(days_since_start // 7 + 1, FIRST_WEEK), LAST_WEEK)
    return SeasonWeek(start.year, week)


def previous_period(season: int, week: int) -> SeasonWeek:
    if week > FIRST_WEEK:
        return SeasonWeek(season, week - 1)
    return SeasonWeek(season - 1, LAST_WEEK)


def validate_period(season: int, week: int) -> SeasonWeek:
    """Reject periods outside the regular season's week range."""

    if season < 1:
        raise ValueError(f"season must be a positive year, got {season}")
    if not FIRST_WEEK <= week <= LAST_WEEK:
        raise ValueError(f"week must be between {FIRST_WEEK} and {LAST_WEEK}, got {week}")
    return SeasonWeek(season, week)
