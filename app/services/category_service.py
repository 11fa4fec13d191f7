"""
Category service - SEO landing pages per (category, location).
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.core.logging import get_logger
from app.models.content import CategoryPage
from app.repositories.content_repository import CategoryPageRepository
from app.repositories.job_repository import JobRepository
from app.utils.normalize import slugify

logger = get_logger(__name__)


def category_slug(category: str, location: Optional[str] = None) -> str:
    """``nursing-jobs`` or ``nursing-jobs-in-lagos``."""
    base = f"{slugify(category)}-jobs"
    if location:
        return f"{base}-in-{slugify(location)}"
    return base


def category_title(category: str, location: Optional[str] = None) -> str:
    if location:
        return f"{category} Jobs in {location}"
    return f"{category} Jobs"


class CategoryService:
    def __init__(self):
        self.page_repo = CategoryPageRepository()
        self.job_repo = JobRepository()

    async def create_or_refresh(
        self,
        db: AsyncSession,
        category: str,
        location: Optional[str] = None,
    ) -> CategoryPage:
        """Create the page if it is new, otherwise refresh its live job count."""
        category = (category or "").strip()
        location = (location or "").strip() or None
        if not category:
            raise BadRequestException("Category is required")

        slug = category_slug(category, location)
        job_count = await self.job_repo.count_matching(db, category=category, location=location)

        page = await self.page_repo.get_by_slug(db, slug)
        if page:
            page.job_count = job_count
        else:
            page = await self.page_repo.create(
                db,
                slug=slug,
                category=category,
                location=location,
                title=category_title(category, location),
                job_count=job_count,
                is_published=True,
            )
        await db.commit()

        logger.info("category_page_refreshed", slug=slug, job_count=job_count)
        return page
