"""
Job feeds - RSS 2.0 and JSON Feed 1.1 over the public job search.
"""
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime
from html import escape as html_escape
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode
from xml.sax.saxutils import escape, quoteattr

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.job import Job
from app.services.job_service import JobService, clamp_limit
from app.utils.dates import as_utc, utcnow
from app.utils.html import strip_html
from app.utils.jobs import get_company_name, parse_location

RSS_DEFAULT_LIMIT = 100
JSON_FEED_DEFAULT_LIMIT = 50
JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"
FEED_TITLE = "JobMeter Jobs Feed"
FEED_DESCRIPTION = "Latest job listings from JobMeter"


@dataclass
class FeedFilters:
    search: Optional[str] = None
    location: Optional[str] = None
    remote: Optional[bool] = None
    source: Optional[str] = None

    def query(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for name in ("search", "location", "source"):
            value = getattr(self, name)
            if value:
                params[name] = value
        if self.remote is not None:
            params["remote"] = "true" if self.remote else "false"
        return params


def rfc822(value: Optional[datetime]) -> str:
    return format_datetime(as_utc(value or utcnow()), usegmt=True)


def job_link(job: Job) -> str:
    return job.source_url or f"{settings.site_url.rstrip('/')}/jobs/{job.slug or job.id}"


def format_salary(salary: Any) -> Optional[str]:
    if not isinstance(salary, dict):
        return None
    low, high = salary.get("min"), salary.get("max")
    currency = salary.get("currency") or "$"

    def _fmt(amount: Any) -> str:
        return f"{amount:,}" if isinstance(amount, (int, float)) else str(amount)

    if low and high:
        return f"{currency} {_fmt(low)} - {_fmt(high)}"
    if low:
        return f"{currency} {_fmt(low)}+"
    if high:
        return f"{currency} {_fmt(high)}"
    return None


def _skills(job: Job) -> List[str]:
    return [str(s) for s in (job.skills_required or []) if s]


def job_html(job: Job) -> str:
    """HTML summary of a job. Every value is escaped."""
    company = get_company_name(job.company)
    location = parse_location(job.location)

    parts = [f"<p><strong>{html_escape(job.title or '')}</strong> at {html_escape(company)}</p>"]
    if location.display:
        parts.append(f"<p><strong>Location:</strong> {html_escape(location.display)}</p>")
    if job.employment_type:
        parts.append(f"<p><strong>Type:</strong> {html_escape(job.employment_type)}</p>")
    if location.remote:
        parts.append("<p><strong>Remote:</strong> Yes</p>")
    salary = format_salary(job.salary_range)
    if salary:
        parts.append(f"<p><strong>Salary:</strong> {html_escape(salary)}</p>")
    description = strip_html(job.description or "")
    if description:
        parts.append(f"<p><strong>Description:</strong></p><div>{html_escape(description)}</div>")
    skills = _skills(job)
    if skills:
        parts.append(f"<p><strong>Skills:</strong> {html_escape(', '.join(skills))}</p>")
    return "".join(parts)


def job_tags(job: Job) -> List[str]:
    location = parse_location(job.location)
    tags: List[str] = []
    if location.display:
        tags.append(location.display)
    if job.employment_type:
        tags.append(job.employment_type)
    if location.remote:
        tags.append("Remote")
    tags.extend(_skills(job))
    return tags


def _rss_item(job: Job) -> str:
    company = get_company_name(job.company)
    lines = [
        "    <item>",
        f"      <title>{escape(f'{job.title} at {company}')}</title>",
        f"      <link>{escape(job_link(job))}</link>",
        f"      <description><![CDATA[{job_html(job)}]]></description>",
        f"      <pubDate>{rfc822(job.posted_date or job.created_at)}</pubDate>",
        f'      <guid isPermaLink="false">{escape(str(job.id))}</guid>',
        f"      <author>{escape(company)}</author>",
    ]
    lines.extend(f"      <category>{escape(tag)}</category>" for tag in job_tags(job))
    lines.append("    </item>")
    return "\n".join(lines)


def render_rss(jobs: List[Job], self_url: str) -> str:
    site = settings.site_url.rstrip("/")
    header = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
        "  <channel>",
        f"    <title>{FEED_TITLE}</title>",
        f"    <link>{escape(site)}</link>",
        f"    <description>{FEED_DESCRIPTION}</description>",
        "    <language>en-us</language>",
        f'    <atom:link href={quoteattr(self_url)} rel="self" type="application/rss+xml" />',
        f"    <lastBuildDate>{rfc822(None)}</lastBuildDate>",
        f"    <generator>{escape(settings.app_name)}</generator>",
        "    <docs>https://www.rssboard.org/rss-specification</docs>",
        "    <ttl>60</ttl>",
    ]
    footer = ["  </channel>", "</rss>"]
    return "\n".join(header + [_rss_item(job) for job in jobs] + footer)


def render_rss_error() -> str:
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "  <channel>",
            "    <title>Error</title>",
            "    <description>Failed to generate RSS feed</description>",
            "    <item>",
            "      <title>Feed Generation Error</title>",
            "      <description>The feed could not be generated. Please try again later.</description>",
            f"      <pubDate>{rfc822(None)}</pubDate>",
            "    </item>",
            "  </channel>",
            "</rss>",
        ]
    )


def json_feed_item(job: Job) -> Dict[str, Any]:
    company = get_company_name(job.company)
    summary = strip_html(job.description or "")
    published = as_utc(job.posted_date or job.created_at)
    return {
        "id": str(job.id),
        "url": job_link(job),
        "title": f"{job.title} at {company}",
        "content_html": job_html(job),
        "summary": summary[:300],
        "date_published": published.isoformat() if published else None,
        "tags": job_tags(job),
        "authors": [{"name": company}],
    }


class FeedService:
    def __init__(self):
        self.job_service = JobService()

    def _feed_url(self, name: str, params: Optional[Dict[str, Any]] = None) -> str:
        url = f"{settings.site_url.rstrip('/')}{settings.api_prefix}/jobs/{name}"
        return f"{url}?{urlencode(params)}" if params else url

    async def rss(
        self,
        db: AsyncSession,
        filters: FeedFilters,
        page: int = 1,
        limit: int = RSS_DEFAULT_LIMIT,
    ) -> str:
        jobs, _ = await self.job_service.search(
            db, page=page, limit=limit, **vars(filters)
        )
        return render_rss(jobs, self._feed_url("feed"))

    async def json_feed(
        self,
        db: AsyncSession,
        filters: FeedFilters,
        page: int = 1,
        limit: int = JSON_FEED_DEFAULT_LIMIT,
    ) -> Dict[str, Any]:
        page = max(page, 1)
        limit = clamp_limit(limit)
        jobs, total = await self.job_service.search(
            db, page=page, limit=limit, **vars(filters)
        )

        query = filters.query()
        feed: Dict[str, Any] = {
            "version": JSON_FEED_VERSION,
            "title": FEED_TITLE,
            "home_page_url": settings.site_url,
            "feed_url": self._feed_url("feed.json", {**query, "page": page, "limit": limit}),
            "description": FEED_DESCRIPTION,
            "language": "en",
            "items": [json_feed_item(job) for job in jobs],
        }
        if page * limit < total:
            feed["next_url"] = self._feed_url("feed.json", {**query, "page": page + 1, "limit": limit})
        return feed
