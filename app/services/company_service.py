"""
Company service - business logic for employer pages.

Jobs point at companies by name only, so the active job count on a detail
page is a live name match over ``jobs.company``.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import CompanyNotFoundException, ConflictException
from app.core.logging import get_logger
from app.models.company import Company
from app.repositories.company_repository import CompanyRepository
from app.repositories.job_repository import JobRepository
from app.schemas.base import PaginatedResponse
from app.schemas.company import CompanyCreate, CompanyDetail, CompanyResponse, CompanyUpdate
from app.utils.dates import utcnow
from app.utils.normalize import slugify

logger = get_logger(__name__)


def generate_company_slug(name: str) -> str:
    return slugify(name) or "company"


class CompanyService:
    """Handles company listing and management."""

    def __init__(self):
        self.company_repo = CompanyRepository()
        self.job_repo = JobRepository()

    async def list_companies(
        self,
        db: AsyncSession,
        *,
        published_only: bool = True,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> PaginatedResponse[CompanyResponse]:
        page = max(page, 1)
        limit = max(1, min(limit, 100))
        companies, total = await self.company_repo.search(
            db, published_only=published_only, search=search, page=page, limit=limit
        )
        return PaginatedResponse(
            items=[CompanyResponse.model_validate(c) for c in companies],
            total=total,
            page=page,
            limit=limit,
            pages=(total + limit - 1) // limit if total > 0 else 0,
        )

    async def get_by_slug(
        self,
        db: AsyncSession,
        slug: str,
        *,
        include_unpublished: bool = False,
    ) -> CompanyDetail:
        """
        Raises:
            CompanyNotFoundException: Unknown slug, or unpublished for the public.
        """
        company = await self.company_repo.get_by_slug(db, slug)
        if not company or (not company.is_published and not include_unpublished):
            raise CompanyNotFoundException()

        detail = CompanyDetail.model_validate(company)
        detail.active_jobs = await self.job_repo.count_for_company(db, company.name)
        return detail

    async def find_by_name(
        self,
        db: AsyncSession,
        name: str,
    ) -> Optional[Company]:
        return await self.company_repo.find_by_name(db, name)

    async def _unique_slug(self, db: AsyncSession, name: str) -> str:
        base = generate_company_slug(name)
        slug, counter = base, 1
        while await self.company_repo.slug_exists(db, slug):
            counter += 1
            slug = f"{base}-{counter}"
        return slug

    async def create(
        self,
        db: AsyncSession,
        payload: CompanyCreate,
    ) -> CompanyResponse:
        """
        Raises:
            ConflictException: A company with this name already exists.
        """
        if await self.company_repo.find_by_name(db, payload.name):
            raise ConflictException("Company already exists", code="COMPANY_EXISTS")

        data = payload.model_dump()
        if data.get("is_published"):
            data["published_at"] = utcnow()
        company = await self.company_repo.create(
            db, slug=await self._unique_slug(db, payload.name), **data
        )
        await db.commit()

        logger.info("company_created", company_id=str(company.id), slug=company.slug)
        return CompanyResponse.model_validate(company)

    async def update(
        self,
        db: AsyncSession,
        company_id: UUID,
        payload: CompanyUpdate,
    ) -> CompanyResponse:
        company = await self.company_repo.get_by_id(db, company_id)
        if not company:
            raise CompanyNotFoundException()

        updates = payload.model_dump(exclude_unset=True)
        if updates.get("is_published") and not company.is_published:
            updates["published_at"] = utcnow()

        company = await self.company_repo.update(db, company, **updates)
        await db.commit()
        return CompanyResponse.model_validate(company)
