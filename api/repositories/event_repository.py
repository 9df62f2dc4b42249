"""Event repository for database operations.

Search filters map directly onto WHERE clauses; derived counters
(confirmed requests, comments) are fetched in one grouped query per page.
"""

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Event, EventState, ParticipationRequest, RequestStatus
from repositories.utils import log_slow_query, paginate


@dataclass(frozen=True)
class AdminEventFilter:
    users: list[int] = field(default_factory=list)
    states: list[EventState] = field(default_factory=list)
    categories: list[int] = field(default_factory=list)
    range_start: datetime | None = None
    range_end: datetime | None = None


@dataclass(frozen=True)
class PublicEventFilter:
    text: str | None = None
    categories: list[int] = field(default_factory=list)
    paid: bool | None = None
    range_start: datetime | None = None
    range_end: datetime | None = None
    only_available: bool = False


def _confirmed_count_subquery():
    return (
        select(func.count(ParticipationRequest.id))
        .where(
            ParticipationRequest.event_id == Event.id,
            ParticipationRequest.status == RequestStatus.CONFIRMED,
        )
        .correlate(Event)
        .scalar_subquery()
    )


class EventRepository:
    """Repository for Event database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, event_id: int) -> Event | None:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        return result.scalar_one_or_none()

    async def get_by_id_and_initiator(
        self, event_id: int, initiator_id: int
    ) -> Event | None:
        result = await self.db.execute(
            select(Event).where(
                Event.id == event_id,
                Event.initiator_id == initiator_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_published(self, event_id: int) -> Event | None:
        result = await self.db.execute(
            select(Event).where(
                Event.id == event_id,
                Event.state == EventState.PUBLISHED,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, event: Event) -> Event:
        self.db.add(event)
        await self.db.flush()
        return event

    async def save(self, event: Event) -> Event:
        """Flush pending changes on an already-tracked event."""
        await self.db.flush()
        return event

    @log_slow_query("list_events_by_initiator")
    async def get_by_initiator(
        self, initiator_id: int, *, offset: int = 0, limit: int = 10
    ) -> list[Event]:
        stmt = (
            select(Event).where(Event.initiator_id == initiator_id).order_by(Event.id)
        )
        result = await self.db.execute(paginate(stmt, offset, limit))
        return list(result.scalars().all())

    @log_slow_query("search_events_admin")
    async def search_admin(
        self, filters: AdminEventFilter, *, offset: int = 0, limit: int = 10
    ) -> list[Event]:
        """Admin search. Date bounds are inclusive."""
        stmt = select(Event)
        if filters.users:
            stmt = stmt.where(Event.initiator_id.in_(filters.users))
        if filters.states:
            stmt = stmt.where(Event.state.in_(filters.states))
        if filters.categories:
            stmt = stmt.where(Event.category_id.in_(filters.categories))
        if filters.range_start is not None:
            stmt = stmt.where(Event.event_date >= filters.range_start)
        if filters.range_end is not None:
            stmt = stmt.where(Event.event_date <= filters.range_end)

        result = await self.db.execute(
            paginate(stmt.order_by(Event.id), offset, limit)
        )
        return list(result.scalars().all())

    def _public_query(self, filters: PublicEventFilter) -> Select:
        stmt = select(Event).where(Event.state == EventState.PUBLISHED)
        if filters.text:
            # autoescape keeps % and _ in the search text literal
            text = filters.text.lower()
            stmt = stmt.where(
                or_(
                    func.lower(Event.annotation).contains(text, autoescape=True),
                    func.lower(Event.description).contains(text, autoescape=True),
                )
            )
        if filters.categories:
            stmt = stmt.where(Event.category_id.in_(filters.categories))
        if filters.paid is not None:
            stmt = stmt.where(Event.paid == filters.paid)
        if filters.range_start is not None:
            stmt = stmt.where(Event.event_date > filters.range_start)
        if filters.range_end is not None:
            stmt = stmt.where(Event.event_date < filters.range_end)
        if filters.only_available:
            stmt = stmt.where(
                or_(
                    Event.participant_limit == 0,
                    _confirmed_count_subquery() < Event.participant_limit,
                )
            )
        return stmt

    @log_slow_query("search_events_public")
    async def search_public(
        self, filters: PublicEventFilter, *, offset: int = 0, limit: int = 10
    ) -> list[Event]:
        """Published events matching ``filters``, ordered by event date."""
        stmt = self._public_query(filters).order_by(Event.event_date, Event.id)
        result = await self.db.execute(paginate(stmt, offset, limit))
        return list(result.scalars().all())

    @log_slow_query("search_events_public_all")
    async def search_public_all(self, filters: PublicEventFilter) -> list[Event]:
        """Every match, unpaged. Used when ordering by a derived value."""
        stmt = self._public_query(filters).order_by(Event.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def confirmed_counts(self, event_ids: list[int]) -> dict[int, int]:
        """CONFIRMED request counts keyed by event id (missing ids mean 0)."""
        if not event_ids:
            return {}
        result = await self.db.execute(
            select(ParticipationRequest.event_id, func.count(ParticipationRequest.id))
            .where(
                ParticipationRequest.event_id.in_(event_ids),
                ParticipationRequest.status == RequestStatus.CONFIRMED,
            )
            .group_by(ParticipationRequest.event_id)
        )
        return {event_id: count for event_id, count in result.all()}
