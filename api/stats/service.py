"""Business rules of the statistics service."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.errors import BadRequestError
from stats.repository import StatsRepository
from stats.schemas import EndpointHitDto, ViewStatsDto

logger = get_logger(__name__)


async def save_hit(db: AsyncSession, data: EndpointHitDto) -> EndpointHitDto:
    hit = await StatsRepository(db).save(data.app, data.uri, data.ip, data.timestamp)
    logger.debug("hit.saved", hit_id=hit.id, app=hit.app, uri=hit.uri)
    return EndpointHitDto(
        id=hit.id,
        app=hit.app,
        uri=hit.uri,
        ip=hit.ip,
        timestamp=hit.created,
    )


async def get_stats(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    uris: list[str] | None = None,
    unique: bool = False,
) -> list[ViewStatsDto]:
    if start > end:
        raise BadRequestError("start must not be after end")

    rows = await StatsRepository(db).aggregate(start, end, uris, unique)
    return [ViewStatsDto(app=app, uri=uri, hits=hits) for app, uri, hits in rows]
