"""
Push notification tokens (Firebase Cloud Messaging registration tokens).
"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class NotificationToken(BaseModel):
    """A browser or device may register before the user signs in, so user_id is optional."""

    __tablename__ = "notification_tokens"

    token: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    platform: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    last_used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
