"""
Company repository - data access for Company entity.
"""
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.company import Company
from app.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    def __init__(self):
        super().__init__(Company)

    async def find_by_name(
        self,
        db: AsyncSession,
        name: str,
    ) -> Optional[Company]:
        """Case-insensitive exact name lookup."""
        result = await db.execute(
            select(Company).where(func.lower(Company.name) == name.strip().lower()).limit(1)
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        db: AsyncSession,
        *,
        published_only: bool = True,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Company], int]:
        query = select(Company)
        if published_only:
            query = query.where(Company.is_published == True)
        if search:
            query = query.where(func.lower(Company.name).like(f"%{search.lower()}%"))

        total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        query = query.order_by(Company.name).offset((page - 1) * limit).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_published(
        self,
        db: AsyncSession,
    ) -> List[Company]:
        result = await db.execute(
            select(Company).where(Company.is_published == True).order_by(Company.name)
        )
        return list(result.scalars().all())

    async def slug_exists(
        self,
        db: AsyncSession,
        slug: str,
    ) -> bool:
        """Check if a company slug already exists."""
        result = await db.execute(
            select(Company.id).where(Company.slug == slug)
        )
        return result.scalar_one_or_none() is not None
