"""User repository for database operations."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import User
from repositories.utils import log_slow_query, paginate


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        """Get a user by their ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def exists(self, user_id: int) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create(self, name: str, email: str) -> User:
        """Create a new user. Caller owns the transaction."""
        user = User(name=name, email=email)
        self.db.add(user)
        await self.db.flush()
        return user

    @log_slow_query("list_users")
    async def get_all(
        self,
        ids: list[int] | None = None,
        *,
        offset: int = 0,
        limit: int = 10,
    ) -> list[User]:
        """List users ordered by id, optionally restricted to ``ids``."""
        stmt = select(User).order_by(User.id)
        if ids:
            stmt = stmt.where(User.id.in_(ids))
        result = await self.db.execute(paginate(stmt, offset, limit))
        return list(result.scalars().all())

    async def delete(self, user_id: int) -> bool:
        """Delete a user. Returns True if a row was removed."""
        result = await self.db.execute(delete(User).where(User.id == user_id))
        return bool(result.rowcount)
