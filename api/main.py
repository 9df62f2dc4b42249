"""FastAPI application for the Explore With Me main service."""

import asyncio
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import fastapi
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from core.config import get_settings
from core.database import (
    create_engine,
    create_session_maker,
    dispose_engine,
    init_db,
)
from core.errors import register_error_handlers
from core.logger import configure_logging, get_logger
from core.middleware import RequestLoggingMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from core.stats_client import close_stats_client
from routes import (
    admin_categories_router,
    admin_comments_router,
    admin_events_router,
    categories_router,
    comments_router,
    events_router,
    health_router,
    private_comments_router,
    private_events_router,
    requests_router,
    users_router,
)

configure_logging()
logger = get_logger(__name__)


async def _run_alembic_migrations() -> None:
    """Run Alembic migrations in a subprocess.

    The migration env uses the synchronous psycopg2 driver, which must not
    run inside the application's event loop.
    """
    cmd = [
        sys.executable,
        "-c",
        (
            "from alembic import command; "
            "from alembic.config import Config; "
            "command.upgrade(Config('alembic.ini'), 'head')"
        ),
    ]
    cwd = Path(__file__).parent

    result = await asyncio.to_thread(
        lambda: subprocess.run(
            cmd, cwd=cwd, capture_output=True, text=True, timeout=120
        )
    )

    if result.returncode != 0:
        stderr = result.stderr.strip()
        logger.error("migrations.failed", stderr=stderr)
        raise RuntimeError(f"Alembic migration failed:\n{stderr}")

    logger.info("migrations.complete")


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create DB engine at startup, dispose on shutdown."""
    settings = get_settings()
    app.state.engine = create_engine(settings)
    app.state.session_maker = create_session_maker(app.state.engine)
    app.state.init_done = False

    try:
        async with asyncio.timeout(60):
            await init_db(app.state.engine)

        if settings.migrate_on_startup:
            async with asyncio.timeout(120):
                await _run_alembic_migrations()

        app.state.init_done = True
        logger.info("init.complete", app_name=settings.app_name)
    except TimeoutError:
        logger.error(
            "init.timeout",
            hint="Startup hung, check DB connectivity and migration state",
        )
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        logger.error("init.failed", error=str(e), exc_info=True)
        raise

    try:
        yield
    finally:
        await close_stats_client()
        await dispose_engine(app.state.engine)


_settings = get_settings()

app = fastapi.FastAPI(
    title="Explore With Me API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
register_error_handlers(app)

if _settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Request-Duration-Ms", "X-Request-Id"],
        max_age=600,
    )

# Outermost, so the logged duration covers every other middleware.
app.add_middleware(RequestLoggingMiddleware)

app.include_router(health_router)
app.include_router(users_router)
app.include_router(admin_categories_router)
app.include_router(categories_router)
app.include_router(private_events_router)
app.include_router(admin_events_router)
app.include_router(events_router)
app.include_router(requests_router)
app.include_router(private_comments_router)
app.include_router(admin_comments_router)
app.include_router(comments_router)
