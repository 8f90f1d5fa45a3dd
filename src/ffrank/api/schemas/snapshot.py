from __future__ import annotations

from pydantic import BaseModel


class SnapshotRunResponse(BaseModel):
    ok: bool = True
    season: int
    week: int
    mode: str
    upserted_players: int
    inserted_snapshots: int
