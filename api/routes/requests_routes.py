"""Participation request endpoints for the requesting user."""

from fastapi import APIRouter, Query
from starlette import status

from core.database import DbSession
from schemas import ParticipationRequestDto
from services.requests_service import (
    cancel_request,
    create_request,
    get_user_requests,
)

router = APIRouter(prefix="/users/{user_id}/requests", tags=["private: requests"])


@router.get("", response_model=list[ParticipationRequestDto])
async def get_user_requests_endpoint(
    user_id: int, db: DbSession
) -> list[ParticipationRequestDto]:
    return await get_user_requests(db, user_id)


@router.post(
    "",
    response_model=ParticipationRequestDto,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "User or event not found"},
        409: {"description": "Request not allowed"},
    },
)
async def create_request_endpoint(
    user_id: int,
    db: DbSession,
    event_id: int = Query(alias="eventId"),
) -> ParticipationRequestDto:
    return await create_request(db, user_id, event_id)


@router.patch(
    "/{request_id}/cancel",
    response_model=ParticipationRequestDto,
    responses={404: {"description": "Request not found"}},
)
async def cancel_request_endpoint(
    user_id: int, request_id: int, db: DbSession
) -> ParticipationRequestDto:
    return await cancel_request(db, user_id, request_id)
