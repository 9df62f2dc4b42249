"""Participation request service.

Requests move PENDING -> CONFIRMED | REJECTED (by the event initiator) or
-> CANCELED (by the requester). Events without moderation, or with no
participant limit, confirm requests as soon as they are made.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.errors import ConflictError, NotFoundError
from models import Event, EventState, ParticipationRequest, RequestStatus
from repositories.event_repository import EventRepository
from repositories.request_repository import RequestRepository
from schemas import (
    EventRequestStatusUpdateRequest,
    EventRequestStatusUpdateResult,
    ParticipationRequestDto,
)
from services.events_service import require_event, require_own_event
from services.users_service import require_user

logger = get_logger(__name__)


def to_request_dto(request: ParticipationRequest) -> ParticipationRequestDto:
    return ParticipationRequestDto(
        id=request.id,
        event=request.event_id,
        requester=request.requester_id,
        created=request.created,
        status=request.status,
    )


def needs_confirmation(event: Event) -> bool:
    return event.request_moderation and event.participant_limit > 0


@dataclass(frozen=True)
class StatusPlan:
    """Outcome of a status update batch, before it touches the database.

    ``confirm`` and ``reject`` partition the batch. ``limit_reached`` means
    every other PENDING request of the event must be rejected as well.
    """

    confirm: list[int]
    reject: list[int]
    limit_reached: bool


def plan_status_update(
    request_ids: list[int],
    status: RequestStatus,
    confirmed: int,
    limit: int,
) -> StatusPlan:
    """Decide which requests of a batch get confirmed and which get rejected.

    Confirmation fills free slots in ascending id order; whatever does not
    fit is rejected. Raises ConflictError when no slot is free.
    """
    ids = sorted(set(request_ids))

    if status == RequestStatus.REJECTED:
        return StatusPlan(confirm=[], reject=ids, limit_reached=False)

    if confirmed >= limit:
        raise ConflictError("The participant limit has been reached")

    free = limit - confirmed
    confirm = ids[:free]
    return StatusPlan(
        confirm=confirm,
        reject=ids[free:],
        limit_reached=confirmed + len(confirm) >= limit,
    )


# =============================================================================
# Requester API
# =============================================================================


async def get_user_requests(
    db: AsyncSession, user_id: int
) -> list[ParticipationRequestDto]:
    await require_user(db, user_id)
    requests = await RequestRepository(db).get_by_requester(user_id)
    return [to_request_dto(r) for r in requests]


async def create_request(
    db: AsyncSession, user_id: int, event_id: int
) -> ParticipationRequestDto:
    """Ask to join a published event."""
    await require_user(db, user_id)
    event = await require_event(db, event_id)
    repo = RequestRepository(db)

    if event.initiator_id == user_id:
        raise ConflictError("The initiator cannot request to join their own event")
    if event.state != EventState.PUBLISHED:
        raise ConflictError("Cannot participate in an unpublished event")
    if await repo.exists_for(event_id, user_id):
        raise ConflictError(
            f"Request from user id={user_id} to event id={event_id} already exists"
        )
    if event.participant_limit > 0:
        confirmed = await repo.count_confirmed(event_id)
        if confirmed >= event.participant_limit:
            raise ConflictError("The participant limit has been reached")

    status = (
        RequestStatus.PENDING if needs_confirmation(event) else RequestStatus.CONFIRMED
    )
    request = await repo.create(event_id, user_id, status)

    logger.info(
        "request.created",
        request_id=request.id,
        event_id=event_id,
        user_id=user_id,
        status=status.value,
    )
    return to_request_dto(request)


async def cancel_request(
    db: AsyncSession, user_id: int, request_id: int
) -> ParticipationRequestDto:
    await require_user(db, user_id)
    repo = RequestRepository(db)
    request = await repo.get_by_id(request_id)
    if request is None or request.requester_id != user_id:
        raise NotFoundError(f"Request with id={request_id} was not found")

    await repo.set_status([request], RequestStatus.CANCELED)
    logger.info("request.canceled", request_id=request_id, user_id=user_id)
    return to_request_dto(request)


# =============================================================================
# Initiator API
# =============================================================================


async def get_event_requests(
    db: AsyncSession, user_id: int, event_id: int
) -> list[ParticipationRequestDto]:
    await require_own_event(db, user_id, event_id)
    requests = await RequestRepository(db).get_by_event(event_id)
    return [to_request_dto(r) for r in requests]


async def update_request_statuses(
    db: AsyncSession,
    user_id: int,
    event_id: int,
    data: EventRequestStatusUpdateRequest,
) -> EventRequestStatusUpdateResult:
    """Confirm or reject a batch of PENDING requests for the user's event."""
    event = await require_own_event(db, user_id, event_id)
    if not needs_confirmation(event):
        raise ConflictError("The event does not require request confirmation")

    repo = RequestRepository(db)
    ids = sorted(set(data.request_ids))
    requests = await repo.get_by_ids(ids)
    by_id = {r.id: r for r in requests if r.event_id == event_id}

    missing = [i for i in ids if i not in by_id]
    if missing:
        raise NotFoundError(
            f"Requests with ids={missing} were not found for event id={event_id}"
        )
    not_pending = [i for i in ids if by_id[i].status != RequestStatus.PENDING]
    if not_pending:
        raise ConflictError(
            f"Only pending requests can be changed, ids={not_pending}"
        )

    confirmed = await repo.count_confirmed(event_id)
    plan = plan_status_update(ids, data.status, confirmed, event.participant_limit)

    to_confirm = [by_id[i] for i in plan.confirm]
    to_reject = [by_id[i] for i in plan.reject]
    await repo.set_status(to_confirm, RequestStatus.CONFIRMED)
    await repo.set_status(to_reject, RequestStatus.REJECTED)

    if plan.limit_reached:
        others = await repo.get_pending_by_event(event_id, exclude_ids=set(ids))
        await repo.set_status(others, RequestStatus.REJECTED)
        if others:
            logger.info(
                "request.rejected_over_limit",
                event_id=event_id,
                count=len(others),
            )

    logger.info(
        "request.statuses_updated",
        event_id=event_id,
        confirmed=len(to_confirm),
        rejected=len(to_reject),
    )
    return EventRequestStatusUpdateResult(
        confirmed_requests=[to_request_dto(r) for r in to_confirm],
        rejected_requests=[to_request_dto(r) for r in to_reject],
    )
