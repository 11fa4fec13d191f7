"""
Credentials and shared secrets.

Passwords are bcrypt hashes. Sessions are a short-lived access JWT plus a
long-lived refresh JWT, told apart by the ``type`` claim. Paystack webhooks
and the scheduler's HTTP triggers are checked against shared secrets.
"""
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: dict[str, Any], kind: str, lifetime: timedelta) -> str:
    payload = {**claims, "type": kind, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(
    data: dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(data, "access", lifetime)


def create_refresh_token(data: dict[str, Any]) -> str:
    return _encode(data, "refresh", timedelta(days=settings.refresh_token_expire_days))


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """Verified claims, or None for a bad signature, expiry or garbage."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def verify_token_type(payload: dict[str, Any], expected_type: str) -> bool:
    return payload.get("type") == expected_type


# ── Shared-secret checks ─────────────────────────────────────────────────────

def compute_hmac_signature(secret: str, payload: bytes, digestmod=hashlib.sha512) -> str:
    """Hex HMAC of a raw request body (Paystack signs with SHA-512)."""
    return hmac.new(secret.encode("utf-8"), payload, digestmod).hexdigest()


def verify_hmac_signature(
    secret: Optional[str],
    payload: bytes,
    signature: Optional[str],
    digestmod=hashlib.sha512,
) -> bool:
    """Constant-time comparison of a webhook signature header."""
    if not secret or not signature:
        return False
    expected = compute_hmac_signature(secret, payload, digestmod)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def verify_cron_key(provided: Optional[str]) -> bool:
    """Check the ?key= query parameter sent by the scheduler."""
    if not provided or not settings.cron_secret_key:
        return False
    return hmac.compare_digest(
        provided.encode("utf-8"), settings.cron_secret_key.encode("utf-8")
    )
