"""
Job model - a job posting on the board.
"""
from datetime import datetime
from typing import Any, Optional
from sqlalchemy import String, Text, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, JSONBType

JOB_STATUS_ACTIVE = "active"
JOB_STATUS_EXPIRED = "expired"


class Job(BaseModel):
    """
    Job posting entity.

    ``company`` and ``location`` are stored as loosely-shaped JSON for
    compatibility with historical rows; use ``app.utils.jobs`` to read them.
    Jobs are deduplicated by ``duplicate_hash``.
    """

    __tablename__ = "jobs"

    __table_args__ = (
        Index("ix_jobs_status_created", "status", "created_at"),
    )

    # Core fields
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    related_roles: Mapped[list] = mapped_column(JSONBType, default=list)
    ai_enhanced_roles: Mapped[list] = mapped_column(JSONBType, default=list)
    sector: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    ai_enhanced_sectors: Mapped[list] = mapped_column(JSONBType, default=list)

    company: Mapped[Optional[Any]] = mapped_column(JSONBType, nullable=True)
    location: Mapped[Optional[Any]] = mapped_column(JSONBType, nullable=True)

    employment_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    experience_level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    skills_required: Mapped[list] = mapped_column(JSONBType, default=list)
    ai_enhanced_skills: Mapped[list] = mapped_column(JSONBType, default=list)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    responsibilities: Mapped[list] = mapped_column(JSONBType, default=list)
    qualifications: Mapped[list] = mapped_column(JSONBType, default=list)
    benefits: Mapped[list] = mapped_column(JSONBType, default=list)

    # {"min", "max", "currency", "period"}
    salary_range: Mapped[Optional[dict]] = mapped_column(JSONBType, nullable=True)
    # {"method", "url", "email", "phone"}
    application: Mapped[Optional[dict]] = mapped_column(JSONBType, nullable=True)
    # {"platform", "group_name"}
    source: Mapped[Optional[dict]] = mapped_column(JSONBType, nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    posted_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    deadline: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=JOB_STATUS_ACTIVE,
        nullable=False,
        index=True,
    )
    slug: Mapped[Optional[str]] = mapped_column(String(300), unique=True, nullable=True, index=True)
    duplicate_hash: Mapped[Optional[str]] = mapped_column(String(500), unique=True, nullable=True)

    def __repr__(self) -> str:
        return f"<Job {self.title}>"
