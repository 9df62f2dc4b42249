"""HTTP client for the statistics service.

RESILIENCE:
- Retry with exponential backoff for transient failures (3 attempts)
- Circuit breaker fails fast when the stats service is down (5 failures -> 30s recovery)
- Connection pooling via a shared httpx.AsyncClient
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime

import httpx
from circuitbreaker import circuit
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from core.config import get_settings
from core.formats import format_datetime
from core.logger import get_logger

logger = get_logger(__name__)

_stats_http_client: httpx.AsyncClient | None = None
_stats_client_lock = asyncio.Lock()


class StatsServerError(Exception):
    """Raised when the stats service answers with a 5xx (retriable)."""


class StatsClientError(Exception):
    """Raised when the stats service rejects a request (4xx, not retriable)."""


RETRIABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.RequestError,
    httpx.TimeoutException,
    StatsServerError,
)


@dataclass(frozen=True)
class ViewStats:
    app: str
    uri: str
    hits: int


async def get_stats_http_client() -> httpx.AsyncClient:
    """Get or create the shared HTTP client for the stats service."""
    global _stats_http_client

    if _stats_http_client is not None and not _stats_http_client.is_closed:
        return _stats_http_client

    async with _stats_client_lock:
        if _stats_http_client is not None and not _stats_http_client.is_closed:
            return _stats_http_client

        settings = get_settings()
        _stats_http_client = httpx.AsyncClient(
            base_url=settings.stats_service_url,
            timeout=settings.http_timeout,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )
        return _stats_http_client


async def close_stats_client() -> None:
    """Close the shared stats HTTP client (called on application shutdown)."""
    global _stats_http_client
    if _stats_http_client is not None and not _stats_http_client.is_closed:
        await _stats_http_client.aclose()
    _stats_http_client = None


def _raise_for_status(response: httpx.Response) -> None:
    if response.status_code >= 500:
        raise StatsServerError(f"Stats service returned {response.status_code}")
    if response.status_code >= 400:
        raise StatsClientError(
            f"Stats service rejected request ({response.status_code}): {response.text}"
        )


@circuit(
    failure_threshold=5,
    recovery_timeout=30,
    expected_exception=RETRIABLE_EXCEPTIONS,
    name="stats_circuit",
)
@retry(
    retry=retry_if_exception_type(RETRIABLE_EXCEPTIONS),
    stop=stop_after_attempt(3),
    wait=wait_exponential_jitter(initial=0.2, max=2),
    reraise=True,
)
async def post_hit(app: str, uri: str, ip: str, timestamp: datetime) -> None:
    """Record one endpoint hit."""
    client = await get_stats_http_client()
    response = await client.post(
        "/hit",
        json={
            "app": app,
            "uri": uri,
            "ip": ip,
            "timestamp": format_datetime(timestamp),
        },
    )
    _raise_for_status(response)


@circuit(
    failure_threshold=5,
    recovery_timeout=30,
    expected_exception=RETRIABLE_EXCEPTIONS,
    name="stats_circuit_read",
)
@retry(
    retry=retry_if_exception_type(RETRIABLE_EXCEPTIONS),
    stop=stop_after_attempt(3),
    wait=wait_exponential_jitter(initial=0.2, max=2),
    reraise=True,
)
async def get_stats(
    start: datetime,
    end: datetime,
    uris: list[str] | None = None,
    unique: bool = False,
) -> list[ViewStats]:
    """Fetch aggregated hit counts, ordered by hits descending."""
    params: list[tuple[str, str]] = [
        ("start", format_datetime(start)),
        ("end", format_datetime(end)),
        ("unique", "true" if unique else "false"),
    ]
    params.extend(("uris", uri) for uri in uris or [])

    client = await get_stats_http_client()
    response = await client.get("/stats", params=params)
    _raise_for_status(response)

    try:
        return [
            ViewStats(app=item["app"], uri=item["uri"], hits=int(item["hits"]))
            for item in response.json()
        ]
    except (ValueError, KeyError, TypeError) as e:
        raise StatsClientError(f"Malformed stats response: {e}") from e
