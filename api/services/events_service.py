"""Event service: creation, moderation workflow and search.

State machine:
    initiator: PENDING|CANCELED --SEND_TO_REVIEW--> PENDING
               PENDING|CANCELED --CANCEL_REVIEW---> CANCELED
    admin:     PENDING --PUBLISH_EVENT--> PUBLISHED
               PENDING --REJECT_EVENT---> CANCELED

Published events are frozen for the initiator; only PENDING events can be
moderated by an admin.
"""

from dataclasses import replace
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.errors import BadRequestError, ConflictError, NotFoundError
from core.formats import format_datetime, utcnow
from models import Category, Event, EventState
from repositories.comment_repository import CommentRepository
from repositories.event_repository import (
    AdminEventFilter,
    EventRepository,
    PublicEventFilter,
)
from schemas import (
    AdminStateAction,
    CategoryDto,
    EventFullDto,
    EventShortDto,
    EventSort,
    LocationDto,
    NewEventDto,
    UpdateEventAdminRequest,
    UpdateEventRequest,
    UpdateEventUserRequest,
    UserShortDto,
    UserStateAction,
)
from services.categories_service import require_category
from services.hits_service import get_views, record_hit
from services.users_service import require_user

logger = get_logger(__name__)

# Minimum lead time between "now" and the event itself
USER_EVENT_LEAD = timedelta(hours=2)
ADMIN_EVENT_LEAD = timedelta(hours=1)


# =============================================================================
# DTO mapping
# =============================================================================


def to_event_full_dto(
    event: Event, confirmed: int = 0, views: int = 0, comments: int = 0
) -> EventFullDto:
    return EventFullDto(
        id=event.id,
        annotation=event.annotation,
        category=CategoryDto.model_validate(event.category),
        confirmed_requests=confirmed,
        created_on=event.created_on,
        description=event.description,
        event_date=event.event_date,
        initiator=UserShortDto.model_validate(event.initiator),
        location=LocationDto(lat=event.lat, lon=event.lon),
        paid=event.paid,
        participant_limit=event.participant_limit,
        published_on=event.published_on,
        request_moderation=event.request_moderation,
        state=event.state,
        title=event.title,
        views=views,
        comments=comments,
    )


def to_event_short_dto(
    event: Event, confirmed: int = 0, views: int = 0, comments: int = 0
) -> EventShortDto:
    return EventShortDto(
        id=event.id,
        annotation=event.annotation,
        category=CategoryDto.model_validate(event.category),
        confirmed_requests=confirmed,
        event_date=event.event_date,
        initiator=UserShortDto.model_validate(event.initiator),
        paid=event.paid,
        title=event.title,
        views=views,
        comments=comments,
    )


async def _counters(
    db: AsyncSession, events: list[Event]
) -> tuple[dict[int, int], dict[int, int], dict[int, int]]:
    """Confirmed requests, views and comments keyed by event id."""
    ids = [e.id for e in events]
    confirmed = await EventRepository(db).confirmed_counts(ids)
    comments = await CommentRepository(db).counts_by_event(ids)
    views = await get_views(events)
    return confirmed, views, comments


async def _full_dtos(db: AsyncSession, events: list[Event]) -> list[EventFullDto]:
    confirmed, views, comments = await _counters(db, events)
    return [
        to_event_full_dto(
            e,
            confirmed.get(e.id, 0),
            views.get(e.id, 0),
            comments.get(e.id, 0),
        )
        for e in events
    ]


async def _full_dto(db: AsyncSession, event: Event) -> EventFullDto:
    return (await _full_dtos(db, [event]))[0]


async def _short_dtos(db: AsyncSession, events: list[Event]) -> list[EventShortDto]:
    confirmed, views, comments = await _counters(db, events)
    return [
        to_event_short_dto(
            e,
            confirmed.get(e.id, 0),
            views.get(e.id, 0),
            comments.get(e.id, 0),
        )
        for e in events
    ]


# =============================================================================
# Validation helpers
# =============================================================================


def _check_event_date(event_date: datetime, lead: timedelta) -> None:
    earliest = utcnow() + lead
    if event_date < earliest:
        raise BadRequestError(
            f"Field: eventDate. Error: must be no earlier than "
            f"{format_datetime(earliest)}. Value: {format_datetime(event_date)}"
        )


async def require_event(db: AsyncSession, event_id: int) -> Event:
    event = await EventRepository(db).get_by_id(event_id)
    if event is None:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event


async def require_own_event(db: AsyncSession, user_id: int, event_id: int) -> Event:
    await require_user(db, user_id)
    event = await EventRepository(db).get_by_id_and_initiator(event_id, user_id)
    if event is None:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event


async def apply_event_changes(
    db: AsyncSession, event: Event, changes: UpdateEventRequest
) -> None:
    """Copy provided fields onto ``event``.

    Fields left out of the request (or sent blank) keep their current value.
    A new category id must resolve to an existing category.
    """
    if changes.annotation is not None:
        event.annotation = changes.annotation
    if changes.description is not None:
        event.description = changes.description
    if changes.title is not None:
        event.title = changes.title
    if changes.category is not None and changes.category != event.category_id:
        category: Category = await require_category(db, changes.category)
        event.category = category
    if changes.event_date is not None:
        event.event_date = changes.event_date
    if changes.location is not None:
        event.lat = changes.location.lat
        event.lon = changes.location.lon
    if changes.paid is not None:
        event.paid = changes.paid
    if changes.participant_limit is not None:
        event.participant_limit = changes.participant_limit
    if changes.request_moderation is not None:
        event.request_moderation = changes.request_moderation


# =============================================================================
# Private API (initiator)
# =============================================================================


async def create_event(
    db: AsyncSession, user_id: int, data: NewEventDto
) -> EventFullDto:
    """Create a PENDING event owned by ``user_id``."""
    _check_event_date(data.event_date, USER_EVENT_LEAD)
    user = await require_user(db, user_id)
    category = await require_category(db, data.category)

    event = Event(
        annotation=data.annotation,
        description=data.description,
        title=data.title,
        category=category,
        initiator=user,
        lat=data.location.lat,
        lon=data.location.lon,
        paid=data.paid,
        participant_limit=data.participant_limit,
        request_moderation=data.request_moderation,
        event_date=data.event_date,
        created_on=utcnow(),
        state=EventState.PENDING,
        published_on=None,
    )
    event = await EventRepository(db).create(event)

    logger.info(
        "event.created",
        event_id=event.id,
        user_id=user_id,
        category_id=category.id,
    )
    return to_event_full_dto(event)


async def get_user_events(
    db: AsyncSession, user_id: int, offset: int, limit: int
) -> list[EventShortDto]:
    await require_user(db, user_id)
    events = await EventRepository(db).get_by_initiator(
        user_id, offset=offset, limit=limit
    )
    return await _short_dtos(db, events)


async def get_user_event(
    db: AsyncSession, user_id: int, event_id: int
) -> EventFullDto:
    event = await require_own_event(db, user_id, event_id)
    return await _full_dto(db, event)


async def update_event_by_user(
    db: AsyncSession,
    user_id: int,
    event_id: int,
    changes: UpdateEventUserRequest,
) -> EventFullDto:
    """Edit a not-yet-published event and optionally move it through review."""
    event = await require_own_event(db, user_id, event_id)

    if event.state == EventState.PUBLISHED:
        raise ConflictError("Only pending or canceled events can be changed")
    if changes.event_date is not None:
        _check_event_date(changes.event_date, USER_EVENT_LEAD)

    await apply_event_changes(db, event, changes)

    if changes.state_action == UserStateAction.SEND_TO_REVIEW:
        event.state = EventState.PENDING
    elif changes.state_action == UserStateAction.CANCEL_REVIEW:
        event.state = EventState.CANCELED

    event = await EventRepository(db).save(event)
    logger.info(
        "event.updated_by_user",
        event_id=event_id,
        user_id=user_id,
        state=event.state.value,
        state_action=changes.state_action,
    )
    return await _full_dto(db, event)


# =============================================================================
# Admin API
# =============================================================================


async def update_event_by_admin(
    db: AsyncSession, event_id: int, changes: UpdateEventAdminRequest
) -> EventFullDto:
    """Edit and moderate a PENDING event."""
    event = await require_event(db, event_id)

    if event.state != EventState.PENDING:
        raise ConflictError(
            f"Cannot modify the event because it's not in the right state: "
            f"{event.state.value}"
        )
    if changes.event_date is not None:
        _check_event_date(changes.event_date, ADMIN_EVENT_LEAD)

    await apply_event_changes(db, event, changes)

    if changes.state_action == AdminStateAction.PUBLISH_EVENT:
        published_on = utcnow()
        if event.event_date < published_on + ADMIN_EVENT_LEAD:
            raise ConflictError(
                "The event must start at least one hour after publication"
            )
        event.state = EventState.PUBLISHED
        event.published_on = published_on
        logger.info("event.published", event_id=event_id)
    elif changes.state_action == AdminStateAction.REJECT_EVENT:
        event.state = EventState.CANCELED
        logger.info("event.rejected", event_id=event_id)

    event = await EventRepository(db).save(event)
    return await _full_dto(db, event)


async def search_events_admin(
    db: AsyncSession, filters: AdminEventFilter, offset: int, limit: int
) -> list[EventFullDto]:
    events = await EventRepository(db).search_admin(
        filters, offset=offset, limit=limit
    )
    return await _full_dtos(db, events)


# =============================================================================
# Public API
# =============================================================================


async def search_events_public(
    db: AsyncSession,
    filters: PublicEventFilter,
    sort: EventSort | None,
    offset: int,
    limit: int,
    *,
    uri: str,
    ip: str,
) -> list[EventShortDto]:
    """Search published events and record the hit.

    Sorting by views needs every match's view count, so that path pages
    in memory after fetching the full result set.
    """
    if (
        filters.range_start is not None
        and filters.range_end is not None
        and filters.range_end < filters.range_start
    ):
        raise BadRequestError("rangeEnd must not be before rangeStart")
    if filters.range_start is None:
        filters = replace(filters, range_start=utcnow())

    await record_hit(uri, ip)

    repo = EventRepository(db)
    if sort == EventSort.VIEWS:
        events = await repo.search_public_all(filters)
        dtos = await _short_dtos(db, events)
        dtos.sort(key=lambda d: (-d.views, d.id))
        return dtos[offset : offset + limit]

    events = await repo.search_public(filters, offset=offset, limit=limit)
    return await _short_dtos(db, events)


async def get_published_event(
    db: AsyncSession, event_id: int, *, uri: str, ip: str
) -> EventFullDto:
    event = await EventRepository(db).get_published(event_id)
    if event is None:
        raise NotFoundError(f"Event with id={event_id} was not found")

    await record_hit(uri, ip)
    return await _full_dto(db, event)
