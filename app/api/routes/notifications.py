"""
Push notification routes.

Broadcast endpoints are triggered by the external scheduler and
guarded by the shared cron key.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_admin_user, get_optional_user, require_cron_key
from app.core.database import get_db
from app.models.user import User
from app.schemas.base import MessageResponse
from app.schemas.notification import (
    BroadcastResult,
    RegisterTokenRequest,
    SendNotificationRequest,
    SendNotificationResponse,
)
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])

notification_service = NotificationService()


@router.post("/tokens", response_model=MessageResponse)
async def register_token(
    payload: RegisterTokenRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Register an FCM device token.

    Anonymous visitors may register; the token is linked to the user
    when they are signed in.
    """
    await notification_service.register_token(
        db, payload.token, user=current_user, platform=payload.platform
    )
    return MessageResponse(message="Token registered successfully")


@router.post("/send", response_model=SendNotificationResponse)
async def send_notification(
    payload: SendNotificationRequest,
    admin: User = Depends(get_admin_user),
):
    """Send a single push notification to one device token."""
    message_id = await notification_service.send_to_token(
        payload.token, payload.title, payload.body, payload.data
    )
    return SendNotificationResponse(success=True, message_id=message_id)


@router.get("/daily-jobs", response_model=BroadcastResult, dependencies=[Depends(require_cron_key)])
async def send_daily_jobs_summary(db: AsyncSession = Depends(get_db)):
    """Broadcast a summary of the latest jobs to every registered device."""
    return await notification_service.send_daily_jobs_summary(db)


@router.get("/match-digests", response_model=BroadcastResult, dependencies=[Depends(require_cron_key)])
async def send_match_digests(db: AsyncSession = Depends(get_db)):
    return await notification_service.send_daily_match_digests(db)


@router.get("/tips/{kind}", response_model=BroadcastResult, dependencies=[Depends(require_cron_key)])
async def send_tip(kind: str, db: AsyncSession = Depends(get_db)):
    """Broadcast a CV, interview or weekly tip."""
    return await notification_service.send_tip(db, kind)
