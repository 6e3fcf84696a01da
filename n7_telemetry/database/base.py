from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import DateTime, Integer, Uuid
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime stored as naive UTC and read back as timezone-aware UTC.
    SQLite keeps no offset, so the conversion happens on both sides.
    Naive values on the way in are taken as UTC already.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Base(AsyncAttrs, DeclarativeBase):
    """
    Base class for all ORM models.
    """
    pass


class CaptureMixin:
    """
    Columns shared by every append-only telemetry table.
    `timestamp` is stamped at write time; `run_id` links rows persisted from
    the same Snapshot across tables.
    """
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False, index=True)
    run_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
