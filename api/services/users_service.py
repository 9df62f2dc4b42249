"""User service for admin user management."""

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.errors import ConflictError, NotFoundError
from models import User
from repositories.user_repository import UserRepository
from schemas import NewUserRequest, UserDto

logger = get_logger(__name__)


def _to_user_dto(user: User) -> UserDto:
    return UserDto(id=user.id, name=user.name, email=user.email)


async def require_user(db: AsyncSession, user_id: int) -> User:
    """Load a user or raise NotFoundError."""
    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User with id={user_id} was not found")
    return user


async def create_user(db: AsyncSession, data: NewUserRequest) -> UserDto:
    """Register a user. Emails are unique."""
    user_repo = UserRepository(db)
    if await user_repo.get_by_email(data.email) is not None:
        raise ConflictError(f"User with email={data.email} already exists")

    user = await user_repo.create(name=data.name, email=data.email)
    logger.info("user.created", user_id=user.id)
    return _to_user_dto(user)


async def get_users(
    db: AsyncSession,
    ids: list[int] | None,
    offset: int,
    limit: int,
) -> list[UserDto]:
    users = await UserRepository(db).get_all(ids, offset=offset, limit=limit)
    return [_to_user_dto(u) for u in users]


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Delete a user together with their events, requests and comments."""
    deleted = await UserRepository(db).delete(user_id)
    if not deleted:
        raise NotFoundError(f"User with id={user_id} was not found")
    logger.info("user.deleted", user_id=user_id)
