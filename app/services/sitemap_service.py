"""
Sitemap service - XML sitemaps served from the site root.

Every builder returns a complete XML document as a string. URLs are
absolute, built from ``settings.site_url``.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set
from xml.sax.saxutils import escape

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.logging import get_logger
from app.models.job import Job
from app.repositories.company_repository import CompanyRepository
from app.repositories.content_repository import BlogPostRepository, CategoryPageRepository
from app.repositories.job_repository import JobRepository
from app.utils.dates import as_utc, utcnow
from app.utils.jobs import parse_location
from app.utils.normalize import location_slug

logger = get_logger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
JOBS_PER_PAGE = 1000
RECENT_JOBS_DAYS = 60
RECENT_JOBS_LIMIT = 5000

CHILD_SITEMAPS = ("static", "categories", "content", "locations")

# (path, changefreq, priority)
STATIC_PAGES = (
    ("", "daily", 1.0),
    ("/jobs", "hourly", 0.9),
    ("/jobs/state", "daily", 0.9),
    ("/resources", "daily", 0.8),
    ("/company", "weekly", 0.7),
    ("/blog", "weekly", 0.7),
    ("/tools", "monthly", 0.7),
    ("/tools/interview", "monthly", 0.6),
    ("/tools/ats-review", "monthly", 0.6),
    ("/tools/career", "monthly", 0.6),
    ("/tools/scam-detector", "monthly", 0.6),
    ("/cv", "monthly", 0.6),
    ("/submit", "monthly", 0.5),
    ("/about", "yearly", 0.4),
    ("/contact", "yearly", 0.4),
    ("/privacy-policy", "yearly", 0.3),
    ("/terms-of-service", "yearly", 0.3),
    ("/disclaimer", "yearly", 0.3),
)


@dataclass
class SitemapEntry:
    loc: str
    lastmod: Optional[datetime] = None
    changefreq: Optional[str] = None
    priority: Optional[float] = None


def site_url(path: str = "") -> str:
    return f"{settings.site_url.rstrip('/')}{path}"


def _lastmod(value: Optional[datetime]) -> str:
    return as_utc(value or utcnow()).isoformat()


def render_urlset(entries: Iterable[SitemapEntry]) -> str:
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', f'<urlset xmlns="{SITEMAP_NS}">']
    for entry in entries:
        lines.append("  <url>")
        lines.append(f"    <loc>{escape(entry.loc)}</loc>")
        lines.append(f"    <lastmod>{_lastmod(entry.lastmod)}</lastmod>")
        if entry.changefreq:
            lines.append(f"    <changefreq>{entry.changefreq}</changefreq>")
        if entry.priority is not None:
            lines.append(f"    <priority>{entry.priority:.1f}</priority>")
        lines.append("  </url>")
    lines.append("</urlset>")
    return "\n".join(lines)


def render_index(locations: Iterable[str], lastmod: Optional[datetime] = None) -> str:
    stamp = _lastmod(lastmod)
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', f'<sitemapindex xmlns="{SITEMAP_NS}">']
    for loc in locations:
        lines.append("  <sitemap>")
        lines.append(f"    <loc>{escape(loc)}</loc>")
        lines.append(f"    <lastmod>{stamp}</lastmod>")
        lines.append("  </sitemap>")
    lines.append("</sitemapindex>")
    return "\n".join(lines)


def job_entry(job: Job) -> SitemapEntry:
    return SitemapEntry(
        loc=site_url(f"/jobs/{job.slug or job.id}"),
        lastmod=job.updated_at or job.created_at,
        changefreq="daily",
        priority=0.7,
    )


def parse_page_number(raw: str) -> Optional[int]:
    """``"3"`` or ``"3.xml"`` -> 3. Anything non-positive or non-numeric -> None."""
    value = (raw or "").strip()
    if value.endswith(".xml"):
        value = value[: -len(".xml")]
    if not value.isdigit():
        return None
    page = int(value)
    return page if page > 0 else None


def collect_states(locations: Iterable) -> Dict[str, Set[str]]:
    """State name -> towns seen in that state."""
    states: Dict[str, Set[str]] = {}
    for raw in locations:
        loc = parse_location(raw)
        if not loc.state:
            continue
        towns = states.setdefault(loc.state, set())
        if loc.city:
            towns.add(loc.city)
    return states


class SitemapService:
    def __init__(self):
        self.job_repo = JobRepository()
        self.category_repo = CategoryPageRepository()
        self.company_repo = CompanyRepository()
        self.blog_repo = BlogPostRepository()

    async def index(self, db: AsyncSession) -> str:
        total = await self.job_repo.count_active(db)
        job_pages = max(1, math.ceil(total / JOBS_PER_PAGE))

        locations: List[str] = [site_url(f"/sitemap-{name}.xml") for name in CHILD_SITEMAPS[:2]]
        locations.extend(site_url(f"/sitemap-jobs/{page}.xml") for page in range(1, job_pages + 1))
        locations.extend(site_url(f"/sitemap-{name}.xml") for name in CHILD_SITEMAPS[2:])
        return render_index(locations)

    def static(self) -> str:
        now = utcnow()
        return render_urlset(
            SitemapEntry(loc=site_url(path), lastmod=now, changefreq=freq, priority=priority)
            for path, freq, priority in STATIC_PAGES
        )

    async def recent_jobs(self, db: AsyncSession) -> str:
        """Active jobs from the last 60 days."""
        since = utcnow() - timedelta(days=RECENT_JOBS_DAYS)
        jobs = await self.job_repo.get_active_page(
            db, offset=0, limit=RECENT_JOBS_LIMIT, since=since
        )
        logger.info("sitemap_jobs_built", jobs=len(jobs))
        return render_urlset(job_entry(job) for job in jobs)

    async def jobs_page(self, db: AsyncSession, page: int) -> str:
        """A 1-based page of active jobs. A page past the end is an empty urlset."""
        jobs = await self.job_repo.get_active_page(
            db, offset=(page - 1) * JOBS_PER_PAGE, limit=JOBS_PER_PAGE
        )
        return render_urlset(job_entry(job) for job in jobs)

    async def categories(self, db: AsyncSession) -> str:
        pages = await self.category_repo.get_published(db)
        return render_urlset(
            SitemapEntry(
                loc=site_url(f"/resources/{page.slug}"),
                lastmod=page.updated_at,
                changefreq="daily",
                priority=0.7 if page.location else 0.8,
            )
            for page in pages
        )

    async def content(self, db: AsyncSession) -> str:
        entries: List[SitemapEntry] = []
        for company in await self.company_repo.get_published(db):
            entries.append(
                SitemapEntry(
                    loc=site_url(f"/company/{company.slug}"),
                    lastmod=company.updated_at,
                    changefreq="weekly",
                    priority=0.6,
                )
            )
        for post in await self.blog_repo.get_published(db):
            entries.append(
                SitemapEntry(
                    loc=site_url(f"/blog/{post.slug}"),
                    lastmod=post.published_at or post.updated_at,
                    changefreq="monthly",
                    priority=0.5,
                )
            )
        return render_urlset(entries)

    async def locations(self, db: AsyncSession) -> str:
        now = utcnow()
        states = collect_states(await self.job_repo.get_active_locations(db))

        entries = [SitemapEntry(loc=site_url("/jobs/state"), lastmod=now, changefreq="daily", priority=0.9)]
        for state in sorted(states):
            state_slug = location_slug(state)
            if not state_slug:
                continue
            entries.append(
                SitemapEntry(
                    loc=site_url(f"/jobs/state/{state_slug}"),
                    lastmod=now,
                    changefreq="daily",
                    priority=0.8,
                )
            )
            for town in sorted(states[state]):
                town_slug = location_slug(town)
                if not town_slug:
                    continue
                entries.append(
                    SitemapEntry(
                        loc=site_url(f"/jobs/state/{state_slug}/{town_slug}"),
                        lastmod=now,
                        changefreq="daily",
                        priority=0.7,
                    )
                )
        return render_urlset(entries)
