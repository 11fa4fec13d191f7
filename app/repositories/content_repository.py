"""
Content repositories - category landing pages and blog posts.
"""
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.content import BlogPost, CategoryPage
from app.repositories.base import BaseRepository


class CategoryPageRepository(BaseRepository[CategoryPage]):
    def __init__(self):
        super().__init__(CategoryPage)

    async def get_published(
        self,
        db: AsyncSession,
    ) -> List[CategoryPage]:
        """Published pages, busiest first."""
        result = await db.execute(
            select(CategoryPage)
            .where(CategoryPage.is_published == True)
            .order_by(CategoryPage.job_count.desc())
        )
        return list(result.scalars().all())


class BlogPostRepository(BaseRepository[BlogPost]):
    def __init__(self):
        super().__init__(BlogPost)

    async def get_published(
        self,
        db: AsyncSession,
    ) -> List[BlogPost]:
        result = await db.execute(
            select(BlogPost)
            .where(BlogPost.is_published == True)
            .order_by(BlogPost.published_at.desc())
        )
        return list(result.scalars().all())
