"""SQLAlchemy models for the statistics service."""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class StatsBase(DeclarativeBase):
    """Separate metadata: the stats tables live in their own database."""


class EndpointHit(StatsBase):
    """One request to a tracked endpoint."""

    __tablename__ = "hits"
    __table_args__ = (Index("ix_hits_uri_created", "uri", "created"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    app: Mapped[str] = mapped_column(String(255), nullable=False)
    uri: Mapped[str] = mapped_column(String(512), nullable=False)
    ip: Mapped[str] = mapped_column(String(45), nullable=False)
    created: Mapped[datetime] = mapped_column(DateTime, nullable=False)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(StatsBase.metadata.create_all)
