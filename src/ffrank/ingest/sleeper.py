"""Thin client for the Sleeper public API (player directory, projections, stats)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ffrank.config.settings import DEFAULT_BASE_URL, DEFAULT_HTTP_TIMEOUT
from ffrank.models import TRACKED_POSITIONS, SleeperPlayer, SleeperProjection, SleeperStats


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_PERIOD_QUERY: list[tuple[str, str]] = [("season_type", "regular")] + [
    ("position[]", position.value) for position in TRACKED_POSITIONS
]


class UpstreamError(Exception):
    """Raised when Sleeper cannot be reached or returns an unusable payload."""

    def __init__(self, endpoint: str, message: str, *, status_code: int | None = None):
        super().__init__(f"Sleeper {endpoint} failed: {message}")
        self.endpoint = endpoint
        self.status_code = status_code


class SleeperClient:
    """Synchronous Sleeper client.

    Pass ``http_client`` to reuse a configured :class:`httpx.Client` (tests use
    an ``httpx.MockTransport``); otherwise one is created from ``base_url``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        http_client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "SleeperClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def fetch_all_players(self) -> Dict[str, SleeperPlayer]:
        return self._get_mapping("/players/nfl", SleeperPlayer)

    def fetch_projections(self, season: int, week: int) -> Dict[str, SleeperProjection]:
        return self._get_mapping(f"/projections/nfl/{season}/{week}", SleeperProjection, params=_PERIOD_QUERY)

    def fetch_stats(self, season: int, week: int) -> Dict[str, SleeperStats]:
        return self._get_mapping(f"/stats/nfl/{season}/{week}", SleeperStats, params=_PERIOD_QUERY)

    def _get_mapping(
        self,
        endpoint: str,
        model: Type[ModelT],
        *,
        params: list[tuple[str, str]] | None = None,
    ) -> Dict[str, ModelT]:
        url = f"{self.base_url}{endpoint}"
        try:
            resp = self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Sleeper request to %s failed: %s", endpoint, exc)
            raise UpstreamError(endpoint, f"transport error: {exc}") from exc

        if resp.is_error:
            logger.warning("Sleeper %s returned HTTP %s", endpoint, resp.status_code)
            raise UpstreamError(endpoint, f"HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamError(endpoint, "response is not valid JSON", status_code=resp.status_code) from exc
        if payload is None:
            # Sleeper answers unknown periods with a literal ``null`` body.
            payload = {}
        if not isinstance(payload, Mapping):
            raise UpstreamError(
                endpoint,
                f"expected a JSON object, got {type(payload).__name__}",
                status_code=resp.status_code,
            )

        try:
            parsed = TypeAdapter(Dict[str, model]).validate_python(payload)
        except ValidationError as exc:
            raise UpstreamError(
                endpoint,
                f"malformed payload ({exc.error_count()} errors)",
                status_code=resp.status_code,
            ) from exc

        logger.debug("Fetched %s entries from %s", len(parsed), endpoint)
        return parsed
