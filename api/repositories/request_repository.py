"""Participation request repository for database operations."""

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import ParticipationRequest, RequestStatus
from repositories.utils import log_slow_query


class RequestRepository:
    """Repository for ParticipationRequest database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, request_id: int) -> ParticipationRequest | None:
        result = await self.db.execute(
            select(ParticipationRequest).where(ParticipationRequest.id == request_id)
        )
        return result.scalar_one_or_none()

    async def get_by_ids(self, request_ids: list[int]) -> list[ParticipationRequest]:
        """Requests with the given ids, ascending by id."""
        if not request_ids:
            return []
        result = await self.db.execute(
            select(ParticipationRequest)
            .where(ParticipationRequest.id.in_(request_ids))
            .order_by(ParticipationRequest.id)
        )
        return list(result.scalars().all())

    async def exists_for(self, event_id: int, requester_id: int) -> bool:
        result = await self.db.execute(
            select(
                exists().where(
                    ParticipationRequest.event_id == event_id,
                    ParticipationRequest.requester_id == requester_id,
                )
            )
        )
        return bool(result.scalar())

    async def create(
        self, event_id: int, requester_id: int, status: RequestStatus
    ) -> ParticipationRequest:
        request = ParticipationRequest(
            event_id=event_id,
            requester_id=requester_id,
            status=status,
        )
        self.db.add(request)
        await self.db.flush()
        return request

    async def get_by_requester(self, requester_id: int) -> list[ParticipationRequest]:
        result = await self.db.execute(
            select(ParticipationRequest)
            .where(ParticipationRequest.requester_id == requester_id)
            .order_by(ParticipationRequest.id)
        )
        return list(result.scalars().all())

    @log_slow_query("list_requests_by_event")
    async def get_by_event(self, event_id: int) -> list[ParticipationRequest]:
        result = await self.db.execute(
            select(ParticipationRequest)
            .where(ParticipationRequest.event_id == event_id)
            .order_by(ParticipationRequest.id)
        )
        return list(result.scalars().all())

    async def get_pending_by_event(
        self, event_id: int, exclude_ids: set[int] | None = None
    ) -> list[ParticipationRequest]:
        stmt = select(ParticipationRequest).where(
            ParticipationRequest.event_id == event_id,
            ParticipationRequest.status == RequestStatus.PENDING,
        )
        if exclude_ids:
            stmt = stmt.where(ParticipationRequest.id.not_in(exclude_ids))
        result = await self.db.execute(stmt.order_by(ParticipationRequest.id))
        return list(result.scalars().all())

    async def count_confirmed(self, event_id: int) -> int:
        result = await self.db.execute(
            select(func.count(ParticipationRequest.id)).where(
                ParticipationRequest.event_id == event_id,
                ParticipationRequest.status == RequestStatus.CONFIRMED,
            )
        )
        return int(result.scalar_one())

    async def set_status(
        self, requests: list[ParticipationRequest], status: RequestStatus
    ) -> None:
        """Set ``status`` on tracked requests and flush."""
        if not requests:
            return
        for request in requests:
            request.status = status
        await self.db.flush()
