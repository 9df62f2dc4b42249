"""Pydantic schemas for API request/response validation.

Field names on the wire are camelCase; Python attributes stay snake_case.
"""

from enum import StrEnum

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from core.formats import ApiDateTime
from models import EventState, RequestStatus


class ApiModel(BaseModel):
    """Base schema: camelCase aliases, population by field name allowed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Users
# =============================================================================


class NewUserRequest(ApiModel):
    name: str = Field(min_length=2, max_length=250)
    email: EmailStr = Field(min_length=6, max_length=254)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v


class UserDto(ApiModel):
    id: int
    name: str
    email: str


class UserShortDto(ApiModel):
    id: int
    name: str


# =============================================================================
# Categories
# =============================================================================


class NewCategoryDto(ApiModel):
    name: str = Field(min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v


class CategoryDto(ApiModel):
    id: int
    name: str


# =============================================================================
# Events
# =============================================================================


class LocationDto(ApiModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class UserStateAction(StrEnum):
    SEND_TO_REVIEW = "SEND_TO_REVIEW"
    CANCEL_REVIEW = "CANCEL_REVIEW"


class AdminStateAction(StrEnum):
    PUBLISH_EVENT = "PUBLISH_EVENT"
    REJECT_EVENT = "REJECT_EVENT"


class EventSort(StrEnum):
    EVENT_DATE = "EVENT_DATE"
    VIEWS = "VIEWS"


def _reject_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("must not be blank")
    return v


class NewEventDto(ApiModel):
    annotation: str = Field(min_length=20, max_length=2000)
    category: int = Field(gt=0)
    description: str = Field(min_length=20, max_length=7000)
    event_date: ApiDateTime
    location: LocationDto
    paid: bool = False
    participant_limit: int = Field(default=0, ge=0)
    request_moderation: bool = True
    title: str = Field(min_length=3, max_length=120)

    check_not_blank = field_validator("annotation", "description", "title")(
        _reject_blank
    )


class UpdateEventRequest(ApiModel):
    """Fields shared by the initiator and admin updates. All optional."""

    annotation: str | None = Field(default=None, min_length=20, max_length=2000)
    category: int | None = Field(default=None, gt=0)
    description: str | None = Field(default=None, min_length=20, max_length=7000)
    event_date: ApiDateTime | None = None
    location: LocationDto | None = None
    paid: bool | None = None
    participant_limit: int | None = Field(default=None, ge=0)
    request_moderation: bool | None = None
    title: str | None = Field(default=None, min_length=3, max_length=120)

    @field_validator("annotation", "description", "title", mode="before")
    @classmethod
    def blank_means_unchanged(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class UpdateEventUserRequest(UpdateEventRequest):
    state_action: UserStateAction | None = None


class UpdateEventAdminRequest(UpdateEventRequest):
    state_action: AdminStateAction | None = None


class EventShortDto(ApiModel):
    id: int
    annotation: str
    category: CategoryDto
    confirmed_requests: int = 0
    event_date: ApiDateTime
    initiator: UserShortDto
    paid: bool
    title: str
    views: int = 0
    comments: int = 0


class EventFullDto(EventShortDto):
    created_on: ApiDateTime
    description: str
    location: LocationDto
    participant_limit: int
    published_on: ApiDateTime | None = None
    request_moderation: bool
    state: EventState


# =============================================================================
# Participation requests
# =============================================================================


class ParticipationRequestDto(ApiModel):
    id: int
    event: int
    requester: int
    created: ApiDateTime
    status: RequestStatus


class EventRequestStatusUpdateRequest(ApiModel):
    request_ids: list[int] = Field(min_length=1)
    status: RequestStatus

    @field_validator("status")
    @classmethod
    def only_confirm_or_reject(cls, v: RequestStatus) -> RequestStatus:
        if v not in (RequestStatus.CONFIRMED, RequestStatus.REJECTED):
            raise ValueError("status must be CONFIRMED or REJECTED")
        return v


class EventRequestStatusUpdateResult(ApiModel):
    confirmed_requests: list[ParticipationRequestDto] = Field(default_factory=list)
    rejected_requests: list[ParticipationRequestDto] = Field(default_factory=list)


# =============================================================================
# Comments
# =============================================================================


class NewCommentDto(ApiModel):
    text: str = Field(min_length=1, max_length=2000)

    check_not_blank = field_validator("text")(_reject_blank)


class CommentDto(ApiModel):
    id: int
    text: str
    event_id: int
    author_name: str
    created: ApiDateTime
    updated: ApiDateTime | None = None


class CommentCountDto(ApiModel):
    event_id: int
    comment_count: int


# =============================================================================
# Health
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


class PoolStatusResponse(BaseModel):
    pool_size: int
    checked_out: int
    overflow: int
    checked_in: int


class DetailedHealthResponse(HealthResponse):
    database: bool
    pool: PoolStatusResponse | None = None
