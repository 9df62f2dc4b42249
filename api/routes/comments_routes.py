"""Comment endpoints: authoring, public reading and admin moderation."""

from fastapi import APIRouter, Query, Request, Response
from starlette import status

from core.database import DbSession
from core.ratelimit import PUBLIC_LIMIT, limiter
from routes.params import Page, int_list
from schemas import CommentCountDto, CommentDto, NewCommentDto
from services.comments_service import (
    add_comment,
    count_comments,
    delete_comment,
    delete_own_comment,
    get_comment,
    get_event_comments,
    get_user_comments,
    update_comment,
)

private_router = APIRouter(prefix="/users/{user_id}", tags=["private: comments"])
admin_router = APIRouter(prefix="/admin/comments", tags=["admin: comments"])
public_router = APIRouter(tags=["public: comments"])


@private_router.post(
    "/events/{event_id}/comments",
    response_model=CommentDto,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "User or event not found"},
        409: {"description": "Event not published"},
    },
)
async def add_comment_endpoint(
    user_id: int, event_id: int, data: NewCommentDto, db: DbSession
) -> CommentDto:
    return await add_comment(db, user_id, event_id, data)


@private_router.patch(
    "/comments/{comment_id}",
    response_model=CommentDto,
    responses={
        404: {"description": "Comment not found"},
        409: {"description": "Not the author"},
    },
)
async def update_comment_endpoint(
    user_id: int, comment_id: int, data: NewCommentDto, db: DbSession
) -> CommentDto:
    return await update_comment(db, user_id, comment_id, data)


@private_router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "Comment not found"},
        409: {"description": "Not the author"},
    },
)
async def delete_own_comment_endpoint(
    user_id: int, comment_id: int, db: DbSession
) -> Response:
    await delete_own_comment(db, user_id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@private_router.get("/comments", response_model=list[CommentDto])
async def get_user_comments_endpoint(
    user_id: int, db: DbSession, page: Page
) -> list[CommentDto]:
    return await get_user_comments(db, user_id, page.offset, page.limit)


@admin_router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Comment not found"}},
)
async def delete_comment_endpoint(comment_id: int, db: DbSession) -> Response:
    await delete_comment(db, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@public_router.get(
    "/events/{event_id}/comments",
    response_model=list[CommentDto],
    responses={404: {"description": "Event not found or not published"}},
)
@limiter.limit(PUBLIC_LIMIT)
async def get_event_comments_endpoint(
    request: Request, event_id: int, db: DbSession, page: Page
) -> list[CommentDto]:
    return await get_event_comments(db, event_id, page.offset, page.limit)


@public_router.get("/comments/count", response_model=list[CommentCountDto])
@limiter.limit(PUBLIC_LIMIT)
async def count_comments_endpoint(
    request: Request,
    db: DbSession,
    event_ids: list[str] = Query(alias="eventIds"),
) -> list[CommentCountDto]:
    """Comment counts for each requested event id."""
    return await count_comments(db, int_list(event_ids, "eventIds"))


@public_router.get(
    "/comments/{comment_id}",
    response_model=CommentDto,
    responses={404: {"description": "Comment not found"}},
)
@limiter.limit(PUBLIC_LIMIT)
async def get_comment_endpoint(
    request: Request, comment_id: int, db: DbSession
) -> CommentDto:
    return await get_comment(db, comment_id)
