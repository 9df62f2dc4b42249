"""Query parameter helpers shared by the routers.

List parameters accept both repeated keys (``?ids=1&ids=2``) and
comma-separated values (``?ids=1,2``).
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, TypeVar

from fastapi import Depends, Query, Request

from core.errors import BadRequestError
from core.formats import parse_datetime


E = TypeVar("E", bound=Enum)


class PageParams:
    """``from``/``size`` paging."""

    def __init__(
        self,
        from_: int = Query(default=0, ge=0, alias="from"),
        size: int = Query(default=10, gt=0, le=1000),
    ):
        self.offset = from_
        self.limit = size


Page = Annotated[PageParams, Depends()]


def _split(values: list[str] | None) -> list[str]:
    if not values:
        return []
    return [part.strip() for v in values for part in v.split(",") if part.strip()]


def int_list(values: list[str] | None, name: str) -> list[int]:
    try:
        return [int(v) for v in _split(values)]
    except ValueError:
        raise BadRequestError(f"Parameter {name} must be a list of integers") from None


def enum_list(
    values: list[str] | None, enum_cls: type[E], name: str
) -> list[E]:
    try:
        return [enum_cls(v) for v in _split(values)]
    except ValueError:
        allowed = ", ".join(str(e.value) for e in enum_cls)
        raise BadRequestError(f"Parameter {name} must be one of: {allowed}") from None


def optional_datetime(value: str | None, name: str) -> datetime | None:
    if value is None or not value.strip():
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        raise BadRequestError(
            f"Parameter {name} must match 'yyyy-MM-dd HH:mm:ss', got {value!r}"
        ) from None


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
