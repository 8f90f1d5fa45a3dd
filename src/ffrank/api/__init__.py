"""REST API for triggering snapshots and reading rankings."""

from __future__ import annotations

import hmac
import logging
from dataclasses import asdict

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from ffrank.api.schemas import HistoryRowResponse, RankingRowResponse, SnapshotRunResponse
from ffrank.config import Settings
from ffrank.ingest import SleeperClient, UpstreamError
from ffrank.models import TRACKED_POSITIONS
from ffrank.persistence import SnapshotStore, StoreError
from ffrank.pipeline import ProviderClient, run_snapshot
from ffrank.ranking import current_rankings


logger = logging.getLogger(__name__)

ALL_POSITIONS = "ALL"
_POSITION_CHOICES = {position.value for position in TRACKED_POSITIONS}


def _authorized(authorization: str | None, secret: str | None) -> bool:
    if not secret:
        return True
    expected = f"Bearer {secret}"
    return authorization is not None and hmac.compare_digest(authorization, expected)


def _normalize_position(position: str | None) -> str | None:
    if not position:
        return None
    value = position.strip().upper()
    if value == ALL_POSITIONS:
        return None
    if value not in _POSITION_CHOICES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown position {position!r}; expected one of {sorted(_POSITION_CHOICES)} or ALL",
        )
    return value


def create_app(
    settings: Settings | None = None,
    *,
    client: ProviderClient | None = None,
    store: SnapshotStore | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="ffrank rankings")
    store = store or SnapshotStore(settings.db_path)
    client = client or SleeperClient(settings.sleeper_base_url, timeout=settings.http_timeout)
    app.state.settings = settings
    app.state.snapshot_store = store
    app.state.provider_client = client

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/cron/snapshot", response_model=SnapshotRunResponse)
    async def trigger_snapshot(
        season: int | None = Query(None, ge=1),
        week: int | None = Query(None, ge=1, le=18),
        authorization: str | None = Header(None),
    ):
        if not _authorized(authorization, settings.cron_secret):
            raise HTTPException(status_code=401, detail="Unauthorized")
        try:
            result = await run_in_threadpool(
                run_snapshot,
                client,
                store,
                season,
                week,
                settings=settings,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except UpstreamError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        except StoreError as exc:
            raise HTTPException(status_code=500, detail=f"Snapshot storage failed: {exc}") from exc
        return SnapshotRunResponse(**result.to_dict())

    @app.get("/players", response_model=list[RankingRowResponse])
    async def list_players(position: str | None = None, team: str | None = None):
        position_filter = _normalize_position(position)
        try:
            rows = current_rankings(store, position=position_filter, team=team)
        except StoreError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return [RankingRowResponse(**asdict(row)) for row in rows]

    @app.get("/players/{player_id}/history", response_model=list[HistoryRowResponse])
    async def player_history(player_id: str):
        try:
            points = store.player_history(player_id)
        except StoreError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return [HistoryRowResponse(**asdict(point)) for point in points]

    return app
