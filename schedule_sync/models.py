"""
SQLAlchemy ORM Models for the schedule store

This module defines the database models for channels and stored programmes.
"""
from datetime import datetime, timezone
from sqlalchemy import String, Integer, DateTime, Index, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """DateTime column that always binds and returns timezone-aware UTC values"""
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class TvChannel(Base):
    """Known broadcast channel, identified durably by its display name"""
    __tablename__ = "tv_channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_name: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<TvChannel(id={self.id}, channel_name={self.channel_name})>"


class StoredProgramme(Base):
    """Programme row of the current schedule. Replaced by delete+insert, never updated."""
    __tablename__ = "programmes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tv_channels.id", ondelete="CASCADE"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    start: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index("idx_programmes_channel_start", "channel_id", "start"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<StoredProgramme(id={self.id}, title={self.title}, channel={self.channel_id}, start={self.start})>"
