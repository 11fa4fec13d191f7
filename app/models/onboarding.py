"""
OnboardingData model - the career profile a user builds from their CV.
"""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, JSONBType

if TYPE_CHECKING:
    from app.models.user import User


class OnboardingData(BaseModel):
    """
    One row per user.

    ``cv_*`` columns hold what was extracted from the uploaded CV; the rest
    are job-search preferences used by the match engine.
    """

    __tablename__ = "onboarding_data"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    # Extracted from CV
    cv_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cv_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cv_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    cv_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cv_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cv_roles: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_skills: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_experience: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cv_work_experience: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_education: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_projects: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_accomplishments: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_awards: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_certifications: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_languages: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_interests: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_publications: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_volunteer_work: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_additional_sections: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_ai_suggested_roles: Mapped[list] = mapped_column(JSONBType, default=list)
    cv_linkedin: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cv_github: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cv_portfolio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Search preferences
    target_roles: Mapped[list] = mapped_column(JSONBType, default=list)
    preferred_locations: Mapped[list] = mapped_column(JSONBType, default=list)
    salary_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    salary_max: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    experience_level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    job_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    remote_preference: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    sector: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Source file
    cv_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cv_file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cv_file_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    cv_file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="onboarding")

    def __repr__(self) -> str:
        return f"<OnboardingData user={self.user_id}>"
