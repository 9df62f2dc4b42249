"""Bridge between public event endpoints and the statistics service.

Failures here never break the calling request: hits are dropped and views
fall back to zero, with a warning logged either way.
"""

import httpx
from circuitbreaker import CircuitBreakerError

from core import get_logger, stats_client
from core.config import get_settings
from core.formats import utcnow
from models import Event

logger = get_logger(__name__)

STATS_FAILURES: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    stats_client.StatsServerError,
    stats_client.StatsClientError,
    CircuitBreakerError,
)


def event_uri(event_id: int) -> str:
    return f"/events/{event_id}"


async def record_hit(uri: str, ip: str) -> None:
    """Send one hit for ``uri`` to the stats service."""
    try:
        await stats_client.post_hit(get_settings().app_name, uri, ip, utcnow())
    except STATS_FAILURES as e:
        logger.warning(
            "stats.hit.failed",
            uri=uri,
            error=str(e),
            error_type=type(e).__name__,
        )


async def get_views(events: list[Event]) -> dict[int, int]:
    """Unique-IP views per event id, counted from the earliest creation time.

    Events the stats service knows nothing about are reported with 0 views.
    """
    views = {event.id: 0 for event in events}
    if not events:
        return views

    uri_to_id = {event_uri(event.id): event.id for event in events}
    start = min(event.created_on for event in events)
    try:
        stats = await stats_client.get_stats(
            start=start,
            end=utcnow(),
            uris=list(uri_to_id),
            unique=True,
        )
    except STATS_FAILURES as e:
        logger.warning(
            "stats.views.failed",
            event_count=len(events),
            error=str(e),
            error_type=type(e).__name__,
        )
        return views

    for item in stats:
        event_id = uri_to_id.get(item.uri)
        if event_id is not None:
            views[event_id] = item.hits
    return views
