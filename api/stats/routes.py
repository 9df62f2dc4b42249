"""HTTP endpoints of the statistics service."""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, Request
from starlette import status

from core.database import DbSession, check_db_connection
from core.errors import BadRequestError
from core.formats import parse_datetime
from schemas import HealthResponse
from stats.config import get_stats_settings
from stats.schemas import EndpointHitDto, ViewStatsDto
from stats.service import get_stats, save_hit

router = APIRouter(tags=["stats"])


def _required_datetime(value: str | None, name: str) -> datetime:
    if value is None or not value.strip():
        raise BadRequestError(f"Parameter {name} is required")
    try:
        return parse_datetime(value)
    except ValueError:
        raise BadRequestError(
            f"Parameter {name} must match 'yyyy-MM-dd HH:mm:ss', got {value!r}"
        ) from None


@router.post(
    "/hit",
    response_model=EndpointHitDto,
    status_code=status.HTTP_201_CREATED,
)
async def hit_endpoint(data: EndpointHitDto, db: DbSession) -> EndpointHitDto:
    """Record that ``uri`` of ``app`` was requested from ``ip``."""
    return await save_hit(db, data)


@router.get(
    "/stats",
    response_model=list[ViewStatsDto],
    responses={400: {"description": "Missing or invalid time range"}},
)
async def stats_endpoint(
    db: DbSession,
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    uris: list[str] | None = Query(default=None),
    unique: bool = Query(default=False),
) -> list[ViewStatsDto]:
    """Hit counts per (app, uri) in ``[start, end]``, most requested first."""
    uri_list = [u.strip() for v in uris or [] for u in v.split(",") if u.strip()]
    return await get_stats(
        db,
        _required_datetime(start, "start"),
        _required_datetime(end, "end"),
        uri_list or None,
        unique,
    )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="healthy", service=get_stats_settings().app_name)


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"description": "Service unavailable - DB unreachable"}},
)
async def ready(request: Request) -> HealthResponse:
    if not getattr(request.app.state, "init_done", False):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Starting",
        )
    try:
        await check_db_connection(request.app.state.engine)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e
    return HealthResponse(status="ready", service=get_stats_settings().app_name)
