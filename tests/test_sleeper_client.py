import httpx
import pytest

from ffrank.ingest import SleeperClient, UpstreamError


BASE = "https://sleeper.test/v1"


def _client(handler) -> SleeperClient:
    return SleeperClient(BASE, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_fetch_all_players_parses_directory():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/players/nfl"
        return httpx.Response(
            200,
            json={
                "4046": {
                    "player_id": "4046",
                    "full_name": "Patrick Mahomes",
                    "position": "QB",
                    "fantasy_positions": ["QB"],
                    "team": "KC",
                    "active": True,
                    "age": 30,
                },
                "9999": {"player_id": "9999", "position": "OL", "fantasy_positions": None, "active": False},
            },
        )

    players = _client(handler).fetch_all_players()

    assert players["4046"].full_name == "Patrick Mahomes"
    assert players["4046"].active is True
    assert players["9999"].fantasy_positions is None


def test_fetch_projections_requests_tracked_positions():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["positions"] = request.url.params.get_list("position[]")
        seen["season_type"] = request.url.params.get("season_type")
        return httpx.Response(200, json={"4046": {"pts_ppr": 24.3, "pass_yd": 280.0}})

    projections = _client(handler).fetch_projections(2025, 5)

    assert seen == {
        "path": "/v1/projections/nfl/2025/5",
        "positions": ["QB", "RB", "WR", "TE", "K"],
        "season_type": "regular",
    }
    assert projections["4046"].pts_ppr == pytest.approx(24.3)


def test_fetch_stats_parses_position_rank():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/stats/nfl/2024/18"
        return httpx.Response(200, json={"4046": {"pts_ppr": 18.0, "pos_rank_ppr": 6}})

    stats = _client(handler).fetch_stats(2024, 18)

    assert stats["4046"].position_rank() == 6


def test_null_body_is_an_empty_mapping():
    stats = _client(lambda request: httpx.Response(200, content=b"null")).fetch_stats(2030, 1)

    assert stats == {}


def test_non_success_status_raises_upstream_error():
    with pytest.raises(UpstreamError) as excinfo:
        _client(lambda request: httpx.Response(503)).fetch_all_players()

    assert excinfo.value.status_code == 503
    assert excinfo.value.endpoint == "/players/nfl"


def test_transport_failure_raises_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        _client(handler).fetch_projections(2025, 1)

    assert excinfo.value.status_code is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"<html>oops</html>"),
        httpx.Response(200, json=[1, 2, 3]),
        httpx.Response(200, json={"4046": {"pts_ppr": "lots"}}),
    ],
)
def test_malformed_payload_raises_upstream_error(response):
    with pytest.raises(UpstreamError):
        _client(lambda request: response).fetch_projections(2025, 1)
