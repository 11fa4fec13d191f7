"""
Sitemap routes, mounted at the site root rather than under the API prefix.
"""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import NotFoundException
from app.core.rate_limit import RATE_FEED, limiter
from app.services.sitemap_service import SitemapService, parse_page_number

router = APIRouter(tags=["sitemaps"])

sitemap_service = SitemapService()

XML_MEDIA_TYPE = "application/xml"
SITEMAP_CACHE_CONTROL = "public, max-age=3600, s-maxage=3600"


def _xml(body: str) -> Response:
    return Response(
        content=body,
        media_type=XML_MEDIA_TYPE,
        headers={"Cache-Control": SITEMAP_CACHE_CONTROL},
    )


@router.get("/sitemap.xml")
@limiter.limit(RATE_FEED)
async def sitemap_index(request: Request, db: AsyncSession = Depends(get_db)):
    """Sitemap index pointing at every child sitemap."""
    return _xml(await sitemap_service.index(db))


@router.get("/sitemap-static.xml")
@limiter.limit(RATE_FEED)
async def sitemap_static(request: Request):
    return _xml(sitemap_service.static())


@router.get("/sitemap-jobs.xml")
@limiter.limit(RATE_FEED)
async def sitemap_recent_jobs(request: Request, db: AsyncSession = Depends(get_db)):
    """Active jobs posted in the last 60 days."""
    return _xml(await sitemap_service.recent_jobs(db))


@router.get("/sitemap-jobs/{page}.xml")
@limiter.limit(RATE_FEED)
async def sitemap_jobs_page(request: Request, page: str, db: AsyncSession = Depends(get_db)):
    number = parse_page_number(page)
    if number is None:
        raise NotFoundException("Sitemap page not found", code="SITEMAP_NOT_FOUND")
    return _xml(await sitemap_service.jobs_page(db, number))


@router.get("/sitemap-categories.xml")
@limiter.limit(RATE_FEED)
async def sitemap_categories(request: Request, db: AsyncSession = Depends(get_db)):
    return _xml(await sitemap_service.categories(db))


@router.get("/sitemap-content.xml")
@limiter.limit(RATE_FEED)
async def sitemap_content(request: Request, db: AsyncSession = Depends(get_db)):
    """Company pages and blog posts."""
    return _xml(await sitemap_service.content(db))


@router.get("/sitemap-locations.xml")
@limiter.limit(RATE_FEED)
async def sitemap_locations(request: Request, db: AsyncSession = Depends(get_db)):
    """State and town landing pages derived from active job locations."""
    return _xml(await sitemap_service.locations(db))
