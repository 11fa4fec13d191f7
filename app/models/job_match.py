"""
Persisted match scores between a user's profile and a job.
"""
import uuid
from datetime import date, datetime
from typing import Optional
from sqlalchemy import Integer, Boolean, String, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, JSONBType


class JobMatch(BaseModel):
    """
    One row per (user, job). Also carries the auto-apply queue state
    for subscribers and whether the user was told about the match.
    """

    __tablename__ = "job_matches"

    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_job_match_user_job"),
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
    score: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    breakdown: Mapped[dict] = mapped_column(JSONBType, default=dict)
    computed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Auto-apply queue
    is_auto_apply_eligible: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    auto_apply_rank: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    plan_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    queued_for_auto_apply_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Daily digest
    notification_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notification_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    notification_sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
