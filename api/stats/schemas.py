"""Pydantic schemas for the statistics service."""

from pydantic import BaseModel, ConfigDict, Field

from core.formats import ApiDateTime


class EndpointHitDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    app: str = Field(min_length=1, max_length=255)
    uri: str = Field(min_length=1, max_length=512)
    ip: str = Field(min_length=1, max_length=45)
    timestamp: ApiDateTime


class ViewStatsDto(BaseModel):
    app: str
    uri: str
    hits: int
