"""API route modules."""

from routes.categories_routes import admin_router as admin_categories_router
from routes.categories_routes import public_router as categories_router
from routes.comments_routes import admin_router as admin_comments_router
from routes.comments_routes import private_router as private_comments_router
from routes.comments_routes import public_router as comments_router
from routes.events_routes import admin_router as admin_events_router
from routes.events_routes import private_router as private_events_router
from routes.events_routes import public_router as events_router
from routes.health_routes import router as health_router
from routes.requests_routes import router as requests_router
from routes.users_routes import router as users_router

__all__ = [
    "admin_categories_router",
    "admin_comments_router",
    "admin_events_router",
    "categories_router",
    "comments_router",
    "events_router",
    "health_router",
    "private_comments_router",
    "private_events_router",
    "requests_router",
    "users_router",
]
