"""Event endpoints.

Three audiences share the event model:
- private: the initiator manages their own events and the requests to them
- admin: moderation and unrestricted search
- public: published events only; every call is reported to the stats service
"""

from fastapi import APIRouter, Query, Request
from starlette import status

from core.database import DbSession
from core.ratelimit import PUBLIC_LIMIT, limiter
from models import EventState
from repositories.event_repository import AdminEventFilter, PublicEventFilter
from routes.params import Page, client_ip, enum_list, int_list, optional_datetime
from schemas import (
    EventFullDto,
    EventRequestStatusUpdateRequest,
    EventRequestStatusUpdateResult,
    EventShortDto,
    EventSort,
    NewEventDto,
    ParticipationRequestDto,
    UpdateEventAdminRequest,
    UpdateEventUserRequest,
)
from services.events_service import (
    create_event,
    get_published_event,
    get_user_event,
    get_user_events,
    search_events_admin,
    search_events_public,
    update_event_by_admin,
    update_event_by_user,
)
from services.requests_service import get_event_requests, update_request_statuses

private_router = APIRouter(prefix="/users/{user_id}/events", tags=["private: events"])
admin_router = APIRouter(prefix="/admin/events", tags=["admin: events"])
public_router = APIRouter(prefix="/events", tags=["public: events"])


# =============================================================================
# Private
# =============================================================================


@private_router.get("", response_model=list[EventShortDto])
async def get_user_events_endpoint(
    user_id: int, db: DbSession, page: Page
) -> list[EventShortDto]:
    """Events created by the user."""
    return await get_user_events(db, user_id, page.offset, page.limit)


@private_router.post(
    "",
    response_model=EventFullDto,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Event date too soon or invalid body"},
        404: {"description": "User or category not found"},
    },
)
async def create_event_endpoint(
    user_id: int, data: NewEventDto, db: DbSession
) -> EventFullDto:
    return await create_event(db, user_id, data)


@private_router.get(
    "/{event_id}",
    response_model=EventFullDto,
    responses={404: {"description": "Event not found"}},
)
async def get_user_event_endpoint(
    user_id: int, event_id: int, db: DbSession
) -> EventFullDto:
    return await get_user_event(db, user_id, event_id)


@private_router.patch(
    "/{event_id}",
    response_model=EventFullDto,
    responses={
        404: {"description": "Event not found"},
        409: {"description": "Event already published"},
    },
)
async def update_user_event_endpoint(
    user_id: int,
    event_id: int,
    data: UpdateEventUserRequest,
    db: DbSession,
) -> EventFullDto:
    return await update_event_by_user(db, user_id, event_id, data)


@private_router.get(
    "/{event_id}/requests",
    response_model=list[ParticipationRequestDto],
    responses={404: {"description": "Event not found"}},
)
async def get_event_requests_endpoint(
    user_id: int, event_id: int, db: DbSession
) -> list[ParticipationRequestDto]:
    """Participation requests to one of the user's events."""
    return await get_event_requests(db, user_id, event_id)


@private_router.patch(
    "/{event_id}/requests",
    response_model=EventRequestStatusUpdateResult,
    responses={
        404: {"description": "Event or request not found"},
        409: {"description": "Limit reached or request not pending"},
    },
)
async def update_event_requests_endpoint(
    user_id: int,
    event_id: int,
    data: EventRequestStatusUpdateRequest,
    db: DbSession,
) -> EventRequestStatusUpdateResult:
    """Confirm or reject pending requests."""
    return await update_request_statuses(db, user_id, event_id, data)


# =============================================================================
# Admin
# =============================================================================


@admin_router.get("", response_model=list[EventFullDto])
async def search_events_admin_endpoint(
    db: DbSession,
    page: Page,
    users: list[str] | None = Query(default=None),
    states: list[str] | None = Query(default=None),
    categories: list[str] | None = Query(default=None),
    range_start: str | None = Query(default=None, alias="rangeStart"),
    range_end: str | None = Query(default=None, alias="rangeEnd"),
) -> list[EventFullDto]:
    filters = AdminEventFilter(
        users=int_list(users, "users"),
        states=enum_list(states, EventState, "states"),
        categories=int_list(categories, "categories"),
        range_start=optional_datetime(range_start, "rangeStart"),
        range_end=optional_datetime(range_end, "rangeEnd"),
    )
    return await search_events_admin(db, filters, page.offset, page.limit)


@admin_router.patch(
    "/{event_id}",
    response_model=EventFullDto,
    responses={
        404: {"description": "Event not found"},
        409: {"description": "Event is not pending"},
    },
)
async def update_admin_event_endpoint(
    event_id: int, data: UpdateEventAdminRequest, db: DbSession
) -> EventFullDto:
    """Edit, publish or reject a pending event."""
    return await update_event_by_admin(db, event_id, data)


# =============================================================================
# Public
# =============================================================================


@public_router.get(
    "",
    response_model=list[EventShortDto],
    responses={400: {"description": "Invalid date range"}},
)
@limiter.limit(PUBLIC_LIMIT)
async def search_events_public_endpoint(
    request: Request,
    db: DbSession,
    page: Page,
    text: str | None = Query(default=None),
    categories: list[str] | None = Query(default=None),
    paid: bool | None = Query(default=None),
    range_start: str | None = Query(default=None, alias="rangeStart"),
    range_end: str | None = Query(default=None, alias="rangeEnd"),
    only_available: bool = Query(default=False, alias="onlyAvailable"),
    sort: EventSort | None = Query(default=None),
) -> list[EventShortDto]:
    filters = PublicEventFilter(
        text=text.strip() if text and text.strip() else None,
        categories=int_list(categories, "categories"),
        paid=paid,
        range_start=optional_datetime(range_start, "rangeStart"),
        range_end=optional_datetime(range_end, "rangeEnd"),
        only_available=only_available,
    )
    return await search_events_public(
        db,
        filters,
        sort,
        page.offset,
        page.limit,
        uri=request.url.path,
        ip=client_ip(request),
    )


@public_router.get(
    "/{event_id}",
    response_model=EventFullDto,
    responses={404: {"description": "Event not found or not published"}},
)
@limiter.limit(PUBLIC_LIMIT)
async def get_event_endpoint(
    request: Request, event_id: int, db: DbSession
) -> EventFullDto:
    return await get_published_event(
        db, event_id, uri=request.url.path, ip=client_ip(request)
    )
