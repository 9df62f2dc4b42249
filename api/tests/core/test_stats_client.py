"""Unit tests for core.stats_client module.

Tests cover:
- post_hit sends the hit body in the wire timestamp format
- get_stats passes repeated uris and the unique flag, and parses the response
- 4xx answers raise StatsClientError without retrying
- 5xx answers are retried, then raise StatsServerError
- get_stats_http_client / close_stats_client singleton lifecycle
"""

from datetime import datetime
from unittest.mock import MagicMock, patch

import httpx
import pytest

import core.stats_client as stats_module
from core.stats_client import (
    StatsClientError,
    StatsServerError,
    ViewStats,
    close_stats_client,
    get_stats,
    get_stats_http_client,
    post_hit,
)

# Bound at import time, so these are the real functions even while the
# autouse ``mock_stats`` fixture patches the module attributes.
_post_hit = post_hit
_get_stats = get_stats


@pytest.fixture(autouse=True)
async def _reset_stats_client():
    """Reset the module-level singleton between tests."""
    yield
    await close_stats_client()


def _install(handler) -> list[httpx.Request]:
    """Route the shared client through a MockTransport; returns seen requests."""
    seen: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    stats_module._stats_http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(recording_handler),
        base_url="http://stats.test",
    )
    return seen


@pytest.mark.unit
class TestPostHit:
    async def test_sends_hit(self):
        seen = _install(lambda request: httpx.Response(201, json={}))

        await _post_hit(
            "ewm-main-service", "/events/1", "10.0.0.1", datetime(2030, 5, 1, 12, 0)
        )

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/hit"
        assert httpx.Response(200, content=request.content).json() == {
            "app": "ewm-main-service",
            "uri": "/events/1",
            "ip": "10.0.0.1",
            "timestamp": "2030-05-01 12:00:00",
        }

    async def test_client_error_is_not_retried(self):
        seen = _install(lambda request: httpx.Response(400, text="bad"))

        with pytest.raises(StatsClientError, match="400"):
            await _post_hit("app", "/events", "1.1.1.1", datetime(2030, 1, 1))

        assert len(seen) == 1


@pytest.mark.unit
class TestGetStats:
    async def test_builds_query_and_parses_response(self):
        seen = _install(
            lambda request: httpx.Response(
                200,
                json=[
                    {"app": "ewm-main-service", "uri": "/events/2", "hits": 5},
                    {"app": "ewm-main-service", "uri": "/events/1", "hits": 3},
                ],
            )
        )

        result = await _get_stats(
            datetime(2020, 1, 1),
            datetime(2030, 1, 1),
            uris=["/events/1", "/events/2"],
            unique=True,
        )

        assert result == [
            ViewStats(app="ewm-main-service", uri="/events/2", hits=5),
            ViewStats(app="ewm-main-service", uri="/events/1", hits=3),
        ]
        params = seen[0].url.params
        assert params["start"] == "2020-01-01 00:00:00"
        assert params["end"] == "2030-01-01 00:00:00"
        assert params["unique"] == "true"
        assert params.get_list("uris") == ["/events/1", "/events/2"]

    async def test_without_uris(self):
        seen = _install(lambda request: httpx.Response(200, json=[]))

        assert await _get_stats(datetime(2020, 1, 1), datetime(2030, 1, 1)) == []
        params = seen[0].url.params
        assert "uris" not in params
        assert params["unique"] == "false"

    async def test_server_error_is_retried_then_raised(self):
        seen = _install(lambda request: httpx.Response(503))

        with pytest.raises(StatsServerError):
            await _get_stats(datetime(2020, 1, 1), datetime(2030, 1, 1))

        assert len(seen) == 3

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>not json</html>"),
            httpx.Response(200, json=[{"app": "ewm-main-service", "hits": 1}]),
            httpx.Response(200, json=[{"app": "a", "uri": "/x", "hits": None}]),
        ],
    )
    async def test_malformed_body_raises_client_error(self, response):
        seen = _install(lambda request: response)

        with pytest.raises(StatsClientError, match="Malformed"):
            await _get_stats(datetime(2020, 1, 1), datetime(2030, 1, 1))

        assert len(seen) == 1


@pytest.mark.unit
class TestStatsHttpClient:
    async def test_creates_client_with_configured_base_url(self):
        mock_settings = MagicMock()
        mock_settings.stats_service_url = "http://stats.internal:9090"
        mock_settings.http_timeout = 2.0
        with patch(
            "core.stats_client.get_settings",
            autospec=True,
            return_value=mock_settings,
        ):
            client = await get_stats_http_client()

        assert isinstance(client, httpx.AsyncClient)
        assert str(client.base_url) == "http://stats.internal:9090"

    async def test_returns_same_instance(self):
        assert await get_stats_http_client() is await get_stats_http_client()

    async def test_close_clears_singleton(self):
        client = await get_stats_http_client()
        await close_stats_client()
        assert client.is_closed
        assert stats_module._stats_http_client is None

    async def test_close_is_noop_when_none(self):
        await close_stats_client()
        await close_stats_client()
