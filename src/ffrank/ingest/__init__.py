"""Input adapters that fetch and normalize upstream provider data."""

from .sleeper import SleeperClient, UpstreamError

__all__ = ["SleeperClient", "UpstreamError"]
