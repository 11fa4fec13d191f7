"""
Pydantic schemas for API validation and serialization.
"""
from app.schemas.base import (
    BaseSchema,
    PaginatedResponse,
    MessageResponse,
)
from app.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    RefreshTokenRequest,
    ChangePasswordRequest,
)
from app.schemas.user import (
    UserUpdate,
    UserResponse,
    UserProfileResponse,
    NotificationSettingsRequest,
)
from app.schemas.job import (
    JobListItem,
    JobDetail,
    MatchResponse,
    ApplyResponse,
)
from app.schemas.credits import CreditDetails, CreditPackage

__all__ = [
    "BaseSchema",
    "PaginatedResponse",
    "MessageResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "RefreshTokenRequest",
    "ChangePasswordRequest",
    "UserUpdate",
    "UserResponse",
    "UserProfileResponse",
    "NotificationSettingsRequest",
    "JobListItem",
    "JobDetail",
    "MatchResponse",
    "ApplyResponse",
    "CreditDetails",
    "CreditPackage",
]
