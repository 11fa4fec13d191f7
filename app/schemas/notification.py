"""
Push notification schemas.
"""
from typing import Any, Dict, Optional

from pydantic import Field

from app.schemas.base import BaseSchema


class RegisterTokenRequest(BaseSchema):
    token: str = Field(..., min_length=10)
    platform: Optional[str] = Field(None, max_length=20)


class SendNotificationRequest(BaseSchema):
    token: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=1000)
    data: Dict[str, Any] = {}


class SendNotificationResponse(BaseSchema):
    success: bool
    message_id: Optional[str] = None


class BroadcastResult(BaseSchema):
    success: bool = True
    message: str
    sent: int = 0
    failed: int = 0
    removed_tokens: int = 0
