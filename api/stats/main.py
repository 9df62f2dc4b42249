"""FastAPI application for the statistics service."""

import asyncio
from contextlib import asynccontextmanager

import fastapi

from core.database import create_engine, create_session_maker, dispose_engine, init_db
from core.errors import register_error_handlers
from core.logger import configure_logging, get_logger
from core.middleware import RequestLoggingMiddleware
from stats.config import get_stats_settings
from stats.models import create_tables
from stats.routes import router

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create the engine and the hits table at startup, dispose on shutdown."""
    settings = get_stats_settings()
    app.state.engine = create_engine(settings)
    app.state.session_maker = create_session_maker(app.state.engine)
    app.state.init_done = False

    try:
        async with asyncio.timeout(60):
            await init_db(app.state.engine)
            await create_tables(app.state.engine)
        app.state.init_done = True
        logger.info("init.complete", app_name=settings.app_name)
    except Exception as e:
        logger.error("init.failed", error=str(e), exc_info=True)
        raise

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


_settings = get_stats_settings()

app = fastapi.FastAPI(
    title="Explore With Me Stats API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs else None,
    redoc_url=None,
    openapi_url="/openapi.json" if _settings.enable_docs else None,
)

register_error_handlers(app)
app.add_middleware(RequestLoggingMiddleware)
app.include_router(router)
