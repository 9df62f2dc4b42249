"""Wire format for timestamps: ``yyyy-MM-dd HH:mm:ss``, naive UTC."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, PlainSerializer

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> datetime:
    """Current UTC time without tzinfo, truncated to whole seconds."""
    return datetime.now(UTC).replace(tzinfo=None, microsecond=0)


def parse_datetime(value: str) -> datetime:
    """Parse a wire timestamp. Raises ValueError on anything else."""
    return datetime.strptime(value.strip(), DATETIME_FORMAT)


def format_datetime(value: datetime) -> str:
    return value.strftime(DATETIME_FORMAT)


def _coerce(value: object) -> object:
    if isinstance(value, str):
        try:
            return parse_datetime(value)
        except ValueError:
            raise ValueError(
                f"must match format 'yyyy-MM-dd HH:mm:ss', got {value!r}"
            ) from None
    return value


ApiDateTime = Annotated[
    datetime,
    BeforeValidator(_coerce),
    PlainSerializer(format_datetime, return_type=str),
]
