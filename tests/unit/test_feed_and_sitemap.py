"""Tests for the pure feed and sitemap builders."""

from __future__ import annotations

import pytest

from app.core.config import settings
from app.services.feed_service import (
    FeedFilters,
    format_salary,
    job_html,
    job_link,
    job_tags,
    json_feed_item,
    render_rss_error,
)
from app.services.sitemap_service import (
    SitemapEntry,
    collect_states,
    parse_page_number,
    render_index,
    render_urlset,
)
from tests.mocks.mock_factories import make_job


@pytest.mark.unit
class TestFeedHelpers:
    """Salary, HTML and item shaping."""

    @pytest.mark.parametrize(
        ("salary", "expected"),
        [
            ({"min": 400000, "max": 800000, "currency": "NGN"}, "NGN 400,000 - 800,000"),
            ({"min": 1500}, "$ 1,500+"),
            ({"max": 90000, "currency": "USD"}, "USD 90,000"),
            ({"currency": "NGN"}, None),
            ("negotiable", None),
        ],
    )
    def test_format_salary(self, salary: object, expected: str | None) -> None:
        """Ranges, open-ended and missing salaries."""
        assert format_salary(salary) == expected

    def test_job_html_escapes(self) -> None:
        """Titles and descriptions are escaped; description HTML is stripped first."""
        job = make_job(title="R&D <Lead>", description="<p>Build <b>things</b> & more</p>")
        html = job_html(job)

        assert "<strong>R&amp;D &lt;Lead&gt;</strong> at Paystack" in html
        assert "Build things &amp; more" in html
        assert "<b>" not in html
        assert "<strong>Location:</strong> Ikeja, Lagos, Nigeria" in html

    def test_tags_and_link(self) -> None:
        """Tags cover location, type, remote and skills; links prefer the source."""
        job = make_job(
            employment_type="Full-time",
            location={"city": "Lekki", "state": "Lagos", "remote": True},
            source_url=None,
            slug="paystack-backend-engineer",
        )
        assert job_tags(job) == ["Lekki, Lagos, Remote", "Full-time", "Remote", "Python", "PostgreSQL"]
        assert job_link(job) == f"{settings.site_url}/jobs/paystack-backend-engineer"
        assert job_link(make_job(source_url="https://careers.example/1")) == "https://careers.example/1"

    def test_json_feed_item(self) -> None:
        """Items carry the company as author and a plain summary."""
        item = json_feed_item(make_job(description="<p>" + "x" * 400 + "</p>"))
        assert item["title"] == "Backend Engineer at Paystack"
        assert item["authors"] == [{"name": "Paystack"}]
        assert len(item["summary"]) == 300

    def test_filters_query(self) -> None:
        """Only set filters are echoed into feed URLs."""
        assert FeedFilters(search="nurse", remote=False).query() == {"search": "nurse", "remote": "false"}
        assert FeedFilters().query() == {}

    def test_error_document(self) -> None:
        """The fallback feed is still RSS."""
        xml = render_rss_error()
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert "<title>Feed Generation Error</title>" in xml


@pytest.mark.unit
class TestSitemapHelpers:
    """Page parsing and XML rendering."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("1", 1), ("3.xml", 3), ("0", None), ("-2", None), ("abc", None), ("", None), ("1.5", None)],
    )
    def test_parse_page_number(self, raw: str, expected: int | None) -> None:
        """Only positive integers are pages."""
        assert parse_page_number(raw) == expected

    def test_urlset_escapes(self) -> None:
        """Locations are XML-escaped and priorities use one decimal."""
        xml = render_urlset([SitemapEntry(loc="https://x.example/?a=1&b=2", changefreq="daily", priority=0.7)])
        assert "<loc>https://x.example/?a=1&amp;b=2</loc>" in xml
        assert "<priority>0.7</priority>" in xml
        assert xml.endswith("</urlset>")

    def test_index(self) -> None:
        """The index lists every child sitemap."""
        xml = render_index(["https://x.example/sitemap-static.xml", "https://x.example/sitemap-jobs/1.xml"])
        assert xml.count("<sitemap>") == 2

    def test_collect_states(self) -> None:
        """Towns are grouped under their state; locations without a state are dropped."""
        states = collect_states(
            [
                {"city": "Ikeja", "state": "Lagos"},
                {"city": "Lekki", "state": "Lagos"},
                {"state": "Abuja"},
                "Remote",
            ]
        )
        assert states == {"Lagos": {"Ikeja", "Lekki"}, "Abuja": set()}
