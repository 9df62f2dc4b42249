"""Hit storage and aggregation queries."""

from datetime import datetime

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from repositories.utils import log_slow_query
from stats.models import EndpointHit


class StatsRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, app: str, uri: str, ip: str, created: datetime) -> EndpointHit:
        hit = EndpointHit(app=app, uri=uri, ip=ip, created=created)
        self.db.add(hit)
        await self.db.flush()
        return hit

    @log_slow_query("aggregate_hits")
    async def aggregate(
        self,
        start: datetime,
        end: datetime,
        uris: list[str] | None = None,
        unique: bool = False,
    ) -> list[tuple[str, str, int]]:
        """``(app, uri, hits)`` rows for hits created in ``[start, end]``.

        With ``unique`` each IP counts once per (app, uri). Rows are ordered
        by hits, highest first.
        """
        counted = distinct(EndpointHit.ip) if unique else EndpointHit.ip
        hits = func.count(counted).label("hits")

        stmt = select(EndpointHit.app, EndpointHit.uri, hits).where(
            EndpointHit.created >= start,
            EndpointHit.created <= end,
        )
        if uris:
            stmt = stmt.where(EndpointHit.uri.in_(uris))
        stmt = stmt.group_by(EndpointHit.app, EndpointHit.uri).order_by(
            hits.desc(), EndpointHit.uri
        )

        result = await self.db.execute(stmt)
        return [(app, uri, int(count)) for app, uri, count in result.all()]
