"""Comment service: authors comment on published events, admins moderate."""

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.errors import ConflictError, NotFoundError
from core.formats import utcnow
from models import Comment, EventState
from repositories.comment_repository import CommentRepository
from repositories.event_repository import EventRepository
from schemas import CommentCountDto, CommentDto, NewCommentDto
from services.events_service import require_event
from services.users_service import require_user

logger = get_logger(__name__)


def to_comment_dto(comment: Comment) -> CommentDto:
    return CommentDto(
        id=comment.id,
        text=comment.text,
        event_id=comment.event_id,
        author_name=comment.author.name,
        created=comment.created,
        updated=comment.updated,
    )


async def _require_comment(db: AsyncSession, comment_id: int) -> Comment:
    comment = await CommentRepository(db).get_by_id(comment_id)
    if comment is None:
        raise NotFoundError(f"Comment with id={comment_id} was not found")
    return comment


async def _require_own_comment(
    db: AsyncSession, user_id: int, comment_id: int
) -> Comment:
    await require_user(db, user_id)
    comment = await _require_comment(db, comment_id)
    if comment.author_id != user_id:
        raise ConflictError("Only the author can change this comment")
    return comment


async def add_comment(
    db: AsyncSession, user_id: int, event_id: int, data: NewCommentDto
) -> CommentDto:
    author = await require_user(db, user_id)
    event = await require_event(db, event_id)
    if event.state != EventState.PUBLISHED:
        raise ConflictError("Only published events can be commented")

    comment = await CommentRepository(db).create(event.id, author, data.text)
    logger.info(
        "comment.created",
        comment_id=comment.id,
        event_id=event_id,
        user_id=user_id,
    )
    return to_comment_dto(comment)


async def update_comment(
    db: AsyncSession, user_id: int, comment_id: int, data: NewCommentDto
) -> CommentDto:
    comment = await _require_own_comment(db, user_id, comment_id)
    comment.text = data.text
    comment.updated = utcnow()
    comment = await CommentRepository(db).save(comment)
    logger.info("comment.updated", comment_id=comment_id, user_id=user_id)
    return to_comment_dto(comment)


async def delete_own_comment(db: AsyncSession, user_id: int, comment_id: int) -> None:
    await _require_own_comment(db, user_id, comment_id)
    await CommentRepository(db).delete(comment_id)
    logger.info("comment.deleted", comment_id=comment_id, user_id=user_id)


async def delete_comment(db: AsyncSession, comment_id: int) -> None:
    """Admin removal; no authorship check."""
    if not await CommentRepository(db).delete(comment_id):
        raise NotFoundError(f"Comment with id={comment_id} was not found")
    logger.info("comment.deleted_by_admin", comment_id=comment_id)


async def get_user_comments(
    db: AsyncSession, user_id: int, offset: int, limit: int
) -> list[CommentDto]:
    await require_user(db, user_id)
    comments = await CommentRepository(db).get_by_author(
        user_id, offset=offset, limit=limit
    )
    return [to_comment_dto(c) for c in comments]


async def get_event_comments(
    db: AsyncSession, event_id: int, offset: int, limit: int
) -> list[CommentDto]:
    if await EventRepository(db).get_published(event_id) is None:
        raise NotFoundError(f"Event with id={event_id} was not found")
    comments = await CommentRepository(db).get_by_event(
        event_id, offset=offset, limit=limit
    )
    return [to_comment_dto(c) for c in comments]


async def get_comment(db: AsyncSession, comment_id: int) -> CommentDto:
    return to_comment_dto(await _require_comment(db, comment_id))


async def count_comments(
    db: AsyncSession, event_ids: list[int]
) -> list[CommentCountDto]:
    counts = await CommentRepository(db).counts_by_event(event_ids)
    return [
        CommentCountDto(event_id=event_id, comment_count=counts.get(event_id, 0))
        for event_id in event_ids
    ]
