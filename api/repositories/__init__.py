"""Query classes for users, categories, events, requests and comments.

Repositories flush but never commit; the request-scoped session owns the
transaction.
"""

from repositories.category_repository import CategoryRepository
from repositories.comment_repository import CommentRepository
from repositories.event_repository import (
    AdminEventFilter,
    EventRepository,
    PublicEventFilter,
)
from repositories.request_repository import RequestRepository
from repositories.user_repository import UserRepository
from repositories.utils import log_slow_query

__all__ = [
    "AdminEventFilter",
    "CategoryRepository",
    "CommentRepository",
    "EventRepository",
    "PublicEventFilter",
    "RequestRepository",
    "UserRepository",
    "log_slow_query",
]
