"""Pydantic models for API I/O."""

from .rankings import HistoryRowResponse, RankingRowResponse
from .snapshot import SnapshotRunResponse

__all__ = [
    "HistoryRowResponse",
    "RankingRowResponse",
    "SnapshotRunResponse",
]
