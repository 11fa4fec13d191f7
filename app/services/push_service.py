"""
Push delivery through Firebase Cloud Messaging.

firebase-admin is synchronous; calls run in a worker thread so they do not
block the event loop.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import firebase_admin
from firebase_admin import credentials, exceptions as firebase_exceptions, messaging

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_VIBRATE_PATTERN = [200, 100, 200]
_BATCH_SIZE = 500


@dataclass
class PushResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BatchPushResult:
    sent: int = 0
    failed: int = 0
    invalid_tokens: List[str] = field(default_factory=list)


def _firebase_app() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        if settings.fcm_credentials_path:
            cred = credentials.Certificate(settings.fcm_credentials_path)
        else:
            cred = credentials.ApplicationDefault()
        return firebase_admin.initialize_app(cred)


def stringify_data(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """FCM data payloads only accept string values."""
    return {str(k): "" if v is None else str(v) for k, v in (data or {}).items()}


def is_invalid_token_error(error: Optional[BaseException]) -> bool:
    if error is None:
        return False
    if isinstance(error, messaging.UnregisteredError):
        return True
    return "not-registered" in str(error).lower()


def build_message(token: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> messaging.Message:
    return messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        data=stringify_data(data),
        webpush=messaging.WebpushConfig(
            notification=messaging.WebpushNotification(
                title=title,
                body=body,
                icon=settings.push_icon_path,
                badge=settings.push_icon_path,
                vibrate=_VIBRATE_PATTERN,
            ),
        ),
    )


class PushService:
    """Thin async facade over ``firebase_admin.messaging``."""

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> PushResult:
        message = build_message(token, title, body, data)
        try:
            app = _firebase_app()
            message_id = await asyncio.to_thread(messaging.send, message, app=app)
        except (firebase_exceptions.FirebaseError, ValueError) as exc:
            logger.warning("push_send_failed", error=str(exc))
            return PushResult(success=False, error=str(exc))
        logger.info("push_sent", message_id=message_id)
        return PushResult(success=True, message_id=message_id)

    async def send_many(
        self,
        tokens: Sequence[str],
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> BatchPushResult:
        """Send to every token; report counts and tokens FCM no longer knows."""
        result = BatchPushResult()
        if not tokens:
            return result

        app = _firebase_app()
        tokens = list(tokens)
        for start in range(0, len(tokens), _BATCH_SIZE):
            chunk = tokens[start:start + _BATCH_SIZE]
            messages = [build_message(t, title, body, data) for t in chunk]
            batch = await asyncio.to_thread(messaging.send_each, messages, app=app)
            for token, response in zip(chunk, batch.responses):
                if response.success:
                    result.sent += 1
                    continue
                result.failed += 1
                if is_invalid_token_error(response.exception):
                    result.invalid_tokens.append(token)

        logger.info(
            "push_batch_sent",
            sent=result.sent,
            failed=result.failed,
            invalid=len(result.invalid_tokens),
        )
        return result
