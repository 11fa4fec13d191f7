"""
Auto-apply subscriptions (Pro / Max / Elite).
"""
import uuid
from datetime import date
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, Integer, Date, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.user import User

SUBSCRIPTION_ACTIVE = "active"

# plan -> (monthly application limit, top-N matches queued per new job)
PLAN_LIMITS = {
    "Pro": (15, 5),
    "Max": (30, 10),
    "Elite": (90, 20),
}


class UserSubscription(BaseModel):
    __tablename__ = "user_subscriptions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=SUBSCRIPTION_ACTIVE, index=True)
    monthly_application_limit: Mapped[int] = mapped_column(Integer, nullable=False)
    applications_used_this_month: Mapped[int] = mapped_column(Integer, default=0)
    monthly_reset_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="subscriptions")

    @property
    def remaining(self) -> int:
        return max(0, self.monthly_application_limit - (self.applications_used_this_month or 0))

    @property
    def auto_apply_top_n(self) -> int:
        return PLAN_LIMITS.get(self.plan_type, (0, 0))[1]
