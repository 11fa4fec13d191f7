"""
Health check routes.

Polled by the load balancer and the uptime monitor. A degraded
dependency is reported, never raised, so the endpoint always answers.
"""
from datetime import datetime, timezone

import redis.asyncio as redis
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.logging import get_logger
from app.schemas.base import BaseSchema

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

REDIS_PING_TIMEOUT_SECONDS = 2


class HealthResponse(BaseSchema):
    status: str
    version: str
    environment: str
    timestamp: str
    checks: dict


async def _check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("health_database_unreachable", error=str(exc))
        return f"unhealthy: {exc}"
    return "healthy"


async def _check_redis() -> str:
    # Redis backs rate limits and the Celery broker
    client = redis.from_url(
        settings.redis_url,
        socket_connect_timeout=REDIS_PING_TIMEOUT_SECONDS,
        socket_timeout=REDIS_PING_TIMEOUT_SECONDS,
    )
    try:
        await client.ping()
    except Exception as exc:
        logger.warning("health_redis_unreachable", error=str(exc))
        return f"unhealthy: {exc}"
    finally:
        await client.aclose()
    return "healthy"


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Database and Redis reachability. ``degraded`` when either is down."""
    checks = {
        "database": await _check_database(db),
        "redis": await _check_redis(),
    }
    all_healthy = all(v == "healthy" for v in checks.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat(),
        checks=checks,
    )
