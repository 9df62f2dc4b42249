"""SQLAlchemy models for the Explore With Me main service."""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.formats import utcnow


class EventState(str, PyEnum):
    """Lifecycle of an event.

    PENDING -> PUBLISHED (admin publishes)
    PENDING -> CANCELED (admin rejects or initiator cancels review)
    CANCELED -> PENDING (initiator sends back to review)
    """

    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    CANCELED = "CANCELED"


class RequestStatus(str, PyEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


def _enum_column(enum_cls: type[PyEnum], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=16,
        values_callable=lambda x: [e.value for e in x],
    )


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(250), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)


class Event(Base):
    """An event proposed by a user and moderated by admins.

    participant_limit == 0 means the event accepts any number of participants.
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_initiator", "initiator_id"),
        Index("ix_events_state_date", "state", "event_date"),
        Index("ix_events_category", "category_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    annotation: Mapped[str] = mapped_column(String(2000), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
    )
    initiator_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lon: Mapped[float] = mapped_column(Float, nullable=False)
    paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    participant_limit: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    request_moderation: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    state: Mapped[EventState] = mapped_column(
        _enum_column(EventState, "event_state"),
        default=EventState.PENDING,
        nullable=False,
    )
    event_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_on: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    published_on: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    category: Mapped["Category"] = relationship(lazy="joined")
    initiator: Mapped["User"] = relationship(lazy="joined")


class ParticipationRequest(Base):
    """A user's request to join an event."""

    __tablename__ = "participation_requests"
    __table_args__ = (
        UniqueConstraint("event_id", "requester_id", name="uq_request_event_requester"),
        Index("ix_requests_event_status", "event_id", "status"),
        Index("ix_requests_requester", "requester_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    requester_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[RequestStatus] = mapped_column(
        _enum_column(RequestStatus, "request_status"),
        default=RequestStatus.PENDING,
        nullable=False,
    )
    created: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_event_created", "event_id", "created"),
        Index("ix_comments_author", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    author: Mapped["User"] = relationship(lazy="joined")
