"""Admin user management endpoints."""

from fastapi import APIRouter, Query, Response
from starlette import status

from core.database import DbSession
from routes.params import Page, int_list
from schemas import NewUserRequest, UserDto
from services.users_service import create_user, delete_user, get_users

router = APIRouter(prefix="/admin/users", tags=["admin: users"])


@router.post(
    "",
    response_model=UserDto,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered"}},
)
async def create_user_endpoint(data: NewUserRequest, db: DbSession) -> UserDto:
    return await create_user(db, data)


@router.get("", response_model=list[UserDto])
async def get_users_endpoint(
    db: DbSession,
    page: Page,
    ids: list[str] | None = Query(default=None),
) -> list[UserDto]:
    """List users, optionally only those in ``ids``."""
    return await get_users(db, int_list(ids, "ids"), page.offset, page.limit)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "User not found"}},
)
async def delete_user_endpoint(user_id: int, db: DbSession) -> Response:
    await delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
