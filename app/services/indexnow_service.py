"""
IndexNow - tells search engines a job page was published.
"""
from typing import Optional

import httpx

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def job_url(slug: str) -> str:
    return f"{settings.site_url.rstrip('/')}/jobs/{slug}"


class IndexNowService:
    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    async def submit(self, slug: str) -> bool:
        """True when the endpoint accepted the URL. Never raises on network errors."""
        key = settings.indexnow_api_key
        if not key:
            return False

        payload = {
            "host": settings.site_host,
            "key": key,
            "keyLocation": f"{settings.site_url.rstrip('/')}/{key}.txt",
            "urlList": [job_url(slug)],
        }
        try:
            if self._client is not None:
                response = await self._client.post(settings.indexnow_endpoint, json=payload)
            else:
                async with httpx.AsyncClient(timeout=10) as client:
                    response = await client.post(settings.indexnow_endpoint, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("indexnow_submit_failed", slug=slug, error=str(exc))
            return False

        ok = response.status_code == 200
        logger.info("indexnow_submitted", slug=slug, status_code=response.status_code, ok=ok)
        return ok
