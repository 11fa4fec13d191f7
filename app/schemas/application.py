"""
Application and in-app notification schemas.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from app.schemas.base import IDSchema


class ApplicationResponse(IDSchema):
    job_id: UUID
    status: str
    application_method: str
    recipient_email: Optional[str] = None
    retry_count: int = 0
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None
    created_at: datetime


class ApplicationNotificationResponse(IDSchema):
    job_id: Optional[UUID] = None
    notification_type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime
