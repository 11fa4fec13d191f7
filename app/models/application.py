"""
Job applications sent on a user's behalf, and the in-app notifications
that report on them.
"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel

APPLICATION_STATUS_PROCESSING = "processing"
APPLICATION_STATUS_SENT = "sent"
APPLICATION_STATUS_FAILED = "failed"

APPLICATION_METHOD_MANUAL = "manual"
APPLICATION_METHOD_AUTO = "auto"

NOTIFICATION_APPLICATION_SENT = "application_sent"
NOTIFICATION_MONTHLY_LIMIT_REACHED = "monthly_limit_reached"


class JobApplication(BaseModel):
    """
    One row per (user, job). Re-applying after a failure reuses the row
    and bumps ``retry_count``.
    """

    __tablename__ = "job_applications"

    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_application_user_job"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    application_method: Mapped[str] = mapped_column(String(20), default=APPLICATION_METHOD_MANUAL)
    recipient_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    plan_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    retry_count: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    ses_message_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cv_generated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cover_letter_generated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<JobApplication user={self.user_id} job={self.job_id} {self.status}>"


class ApplicationNotification(BaseModel):
    """In-app notification: application_sent, monthly_limit_reached, ..."""

    __tablename__ = "application_notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("jobs.id", ondelete="SET NULL"),
        nullable=True,
    )
    application_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("job_applications.id", ondelete="SET NULL"),
        nullable=True,
    )
    notification_type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
