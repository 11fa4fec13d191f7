"""
Application routes - sent applications and their in-app notifications.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.application import ApplicationNotificationResponse, ApplicationResponse
from app.services.auto_apply_service import AutoApplyService
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/applications", tags=["applications"])

auto_apply_service = AutoApplyService()
notification_service = NotificationService()


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The current user's applications, newest first."""
    return await auto_apply_service.list_applications(db, current_user)


@router.get("/notifications", response_model=List[ApplicationNotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_service.list_application_notifications(
        db, current_user, unread_only=unread_only
    )


@router.post(
    "/notifications/{notification_id}/read",
    response_model=ApplicationNotificationResponse,
)
async def mark_notification_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_service.mark_read(db, current_user, notification_id)
