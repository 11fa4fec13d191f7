"""
Credit balances and the transaction ledger.
"""
import uuid
from datetime import date
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, Integer, Date, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.user import User

TRANSACTION_PURCHASE = "purchase"
TRANSACTION_USAGE = "usage"
TRANSACTION_BONUS = "bonus"


class UserCredits(BaseModel):
    """
    ``balance`` is permanent (purchased) credit. ``daily_credits_available``
    is the free allowance topped up once per day and spent first.
    """

    __tablename__ = "user_credits"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    daily_credits_available: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    daily_credits_last_awarded: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    daily_credits_last_used: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="credits")

    @property
    def total(self) -> int:
        return (self.balance or 0) + (self.daily_credits_available or 0)


class CreditTransaction(BaseModel):
    """A purchase reference can be credited only once."""

    __tablename__ = "credit_transactions"
    __table_args__ = (
        Index(
            "uq_credit_transactions_purchase_reference",
            "reference_id",
            unique=True,
            postgresql_where=text("transaction_type = 'purchase'"),
            sqlite_where=text("transaction_type = 'purchase'"),
        ),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    reference_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
