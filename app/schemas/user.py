"""
Account payloads. The career profile has its own schemas in onboarding.py.
"""
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


class UserResponse(IDSchema, TimestampSchema):
    email: EmailStr
    full_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    email_verified: bool
    is_active: bool
    is_admin: bool = False
    notifications_enabled: bool = True
    last_seen_at: Optional[datetime] = None


class UserProfileResponse(UserResponse):
    """What the dashboard header needs in one call."""

    onboarding_completed: bool = False
    credits_total: int = 0
    subscription_plan: Optional[str] = None


class UserUpdate(BaseSchema):
    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)

    @field_validator("full_name", "phone", "location")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        # Blank strings mean "leave unchanged"; None is dropped by exclude_none.
        if value is None:
            return None
        return value.strip() or None


class NotificationSettingsRequest(BaseSchema):
    notifications_enabled: bool
