"""
Request throttling with slowapi, counted in Redis so every API worker
shares the same windows.

Signed-in callers are keyed by account, so a shared office IP does not
throttle a whole team. Anonymous callers (feeds, submissions) are keyed
by client address.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from app.core.config import settings
from app.core.security import decode_token, verify_token_type


def rate_limit_key(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        payload = decode_token(token)
        if payload and verify_token_type(payload, "access") and payload.get("sub"):
            return f"user:{payload['sub']}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=rate_limit_key,
    storage_uri=settings.redis_url,
    strategy="fixed-window",
)

RATE_AUTH = "5/minute"
RATE_CV_UPLOAD = "5/hour"
RATE_AI = "20/hour"            # career tools, CV parsing, job submissions
RATE_AUTO_APPLY = "10/hour"    # each apply renders two PDFs and sends an email
RATE_PAYMENT = "10/minute"
RATE_FEED = "120/minute"       # RSS, JSON Feed and sitemaps
