"""
Job URL slugs: ``{company}-{title}-{id}``.
"""
import re
import time
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.utils.jobs import get_company_name
from app.utils.normalize import slugify

_TRAILING_UUID = re.compile(
    r"([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})$",
    re.IGNORECASE,
)
_TRAILING_DIGITS = re.compile(r"(?:^|-)(\d+)$")


def _parts(title: Optional[str], company: Any) -> str:
    company_name = get_company_name(company) if company else "Unknown Company"
    return f"{slugify(company_name)}-{slugify(title or 'Untitled Job')}"


def generate_job_slug(job_id: Any, title: Optional[str], company: Any) -> str:
    return f"{_parts(title, company)}-{job_id}"


def parse_job_slug(slug: str) -> Optional[str]:
    """Return the id embedded at the end of a slug, or None."""
    if not slug:
        return None
    match = _TRAILING_UUID.search(slug)
    if match:
        return match.group(1).lower()
    match = _TRAILING_DIGITS.search(slug)
    if match:
        return match.group(1)
    return None


async def unique_job_slug(
    db: AsyncSession,
    title: Optional[str],
    company: Any,
    exclude_id: Optional[UUID] = None,
) -> str:
    """
    ``{company}-{title}``, then ``-1`` .. ``-100`` while taken, then a
    millisecond timestamp suffix.
    """
    from app.models.job import Job

    base = _parts(title, company)

    async def _taken(candidate: str) -> bool:
        query = select(Job.id).where(Job.slug == candidate)
        if exclude_id is not None:
            query = query.where(Job.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    if not await _taken(base):
        return base
    for counter in range(1, 101):
        candidate = f"{base}-{counter}"
        if not await _taken(candidate):
            return candidate
    return f"{base}-{int(time.time() * 1000)}"
