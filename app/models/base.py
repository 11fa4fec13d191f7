"""
Declarative base for every JobMeter table: UUID keys, UTC timestamps and a
JSON column type that is JSONB on PostgreSQL.
"""
import uuid
from datetime import datetime
from sqlalchemy import JSON, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import JSONB, UUID

from app.core.database import Base
from app.utils.dates import utcnow

# Company, location, salary and CV sections are free-form JSON.
# SQLite (tests) falls back to plain JSON.
JSONBType = JSON().with_variant(JSONB(), "postgresql")


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


class UUIDMixin:
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )


class BaseModel(Base, UUIDMixin, TimestampMixin):
    """Abstract parent of all models."""

    __abstract__ = True
