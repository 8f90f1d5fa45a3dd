"""Runtime settings read from the environment or a JSON profile."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from ffrank.models import ScoringFormat

from .season import SEASON_START


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.sleeper.app/v1"
DEFAULT_DB_PATH = "ffrank.sqlite"
DEFAULT_HTTP_TIMEOUT = 30.0

_DB_PATH_ENV = "FFRANK_DB_PATH"
_BASE_URL_ENV = "FFRANK_SLEEPER_BASE_URL"
_HTTP_TIMEOUT_ENV = "FFRANK_HTTP_TIMEOUT"
_CRON_SECRET_ENV = "FFRANK_CRON_SECRET"
_SEASON_START_ENV = "FFRANK_SEASON_START"
_SCORING_ENV = "FFRANK_SCORING"


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _parse_season_start(raw: str | None, default: datetime) -> datetime:
    if not raw:
        return default
    try:
        value = datetime.fromisoformat(raw.strip())
    except ValueError:
        logger.warning("Invalid season start %s; using default %s", raw, default.date().isoformat())
        return default
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _parse_scoring(raw: str | None, default: ScoringFormat) -> ScoringFormat:
    if not raw:
        return default
    try:
        return ScoringFormat(raw.strip().lower())
    except ValueError:
        logger.warning("Invalid scoring format %s; using default %s", raw, default.value)
        return default


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    sleeper_base_url: str = DEFAULT_BASE_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    cron_secret: Optional[str] = None
    season_start: datetime = field(default=SEASON_START)
    scoring: ScoringFormat = ScoringFormat.PPR

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_path=os.getenv(_DB_PATH_ENV) or DEFAULT_DB_PATH,
            sleeper_base_url=(os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL).rstrip("/"),
            http_timeout=_env_float(_HTTP_TIMEOUT_ENV, DEFAULT_HTTP_TIMEOUT, clamp_min=1.0),
            cron_secret=os.getenv(_CRON_SECRET_ENV) or None,
            season_start=_parse_season_start(os.getenv(_SEASON_START_ENV), SEASON_START),
            scoring=_parse_scoring(os.getenv(_SCORING_ENV), ScoringFormat.PPR),
        )

    @classmethod
    def load(cls, path: Path, *, base: "Settings | None" = None) -> "Settings":
        """Overlay a JSON profile on top of ``base`` (environment settings by default)."""

        data: Mapping[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        base = base or cls.from_env()
        updates: dict[str, Any] = {}
        if data.get("db_path"):
            updates["db_path"] = str(data["db_path"])
        if data.get("sleeper_base_url"):
            updates["sleeper_base_url"] = str(data["sleeper_base_url"]).rstrip("/")
        if data.get("http_timeout") is not None:
            updates["http_timeout"] = max(1.0, float(data["http_timeout"]))
        if "cron_secret" in data:
            updates["cron_secret"] = data["cron_secret"] or None
        if data.get("season_start"):
            updates["season_start"] = _parse_season_start(str(data["season_start"]), base.season_start)
        if data.get("scoring"):
            updates["scoring"] = _parse_scoring(str(data["scoring"]), base.scoring)
        return replace(base, **updates)

    def save(self, path: Path) -> None:
        payload = asdict(self)
        payload["season_start"] = self.season_start.isoformat()
        payload["scoring"] = self.scoring.value
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
