"""Comment repository for database operations."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Comment, User
from repositories.utils import paginate


class CommentRepository:
    """Repository for Comment database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, comment_id: int) -> Comment | None:
        result = await self.db.execute(select(Comment).where(Comment.id == comment_id))
        return result.scalar_one_or_none()

    async def create(self, event_id: int, author: User, text: str) -> Comment:
        comment = Comment(event_id=event_id, author=author, text=text, updated=None)
        self.db.add(comment)
        await self.db.flush()
        return comment

    async def save(self, comment: Comment) -> Comment:
        await self.db.flush()
        return comment

    async def get_by_event(
        self, event_id: int, *, offset: int = 0, limit: int = 10
    ) -> list[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.event_id == event_id)
            .order_by(Comment.created, Comment.id)
        )
        result = await self.db.execute(paginate(stmt, offset, limit))
        return list(result.scalars().all())

    async def get_by_author(
        self, author_id: int, *, offset: int = 0, limit: int = 10
    ) -> list[Comment]:
        stmt = (
            select(Comment).where(Comment.author_id == author_id).order_by(Comment.id)
        )
        result = await self.db.execute(paginate(stmt, offset, limit))
        return list(result.scalars().all())

    async def delete(self, comment_id: int) -> bool:
        result = await self.db.execute(delete(Comment).where(Comment.id == comment_id))
        return bool(result.rowcount)

    async def counts_by_event(self, event_ids: list[int]) -> dict[int, int]:
        """Comment counts keyed by event id (missing ids mean 0)."""
        if not event_ids:
            return {}
        result = await self.db.execute(
            select(Comment.event_id, func.count(Comment.id))
            .where(Comment.event_id.in_(event_ids))
            .group_by(Comment.event_id)
        )
        return {event_id: count for event_id, count in result.all()}
