"""Tests for job submissions, category pages and IndexNow pings."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BadRequestException, ExternalServiceException
from app.models.content import CategoryPage
from app.models.job import Job
from app.services import submission_service
from app.services.category_service import CategoryService, category_slug, category_title
from app.services.indexnow_service import IndexNowService
from app.services.submission_service import (
    SubmissionService,
    build_duplicate_hash,
    parse_iso_datetime,
)
from tests.mocks.mock_factories import make_job

PARSED_JOB = {
    "title": "Staff Nurse",
    "company": {"name": "Reddington Hospital"},
    "location": {"city": "Victoria Island", "state": "Lagos", "country": "Nigeria"},
    "sector": "Healthcare & Medical",
    "application": {"email": "hr@reddington.example"},
    "deadline": "2026-12-01T00:00:00Z",
    "salary_range": None,
}


@pytest.mark.unit
class TestHelpers:
    """Dedupe hash and date parsing."""

    def test_hash_ignores_case_and_padding(self) -> None:
        """The same posting hashes the same regardless of case."""
        first = build_duplicate_hash("Staff Nurse ", {"name": "Reddington"}, None)
        second = build_duplicate_hash("staff nurse", "REDDINGTON", "")
        assert first == second
        assert len(first) == 64

    def test_hash_differs_by_source(self) -> None:
        """Different source URLs are different postings."""
        assert build_duplicate_hash("Nurse", "A", "https://a.example/1") != build_duplicate_hash(
            "Nurse", "A", "https://a.example/2"
        )

    def test_parse_iso_datetime(self) -> None:
        """Zulu timestamps parse to UTC and junk gives None."""
        parsed = parse_iso_datetime("2026-12-01T00:00:00Z")
        assert parsed is not None and parsed.utcoffset().total_seconds() == 0
        assert parse_iso_datetime("next friday") is None
        assert parse_iso_datetime(None) is None


@pytest.mark.unit
class TestProcessSubmission:
    """AI parsing mocked; Celery follow-ups patched out."""

    @pytest.mark.asyncio
    async def test_empty_text(self, session: AsyncSession) -> None:
        """Blank text is rejected before any AI call."""
        with pytest.raises(BadRequestException):
            await SubmissionService().process_submission(session, "   ")

    @pytest.mark.asyncio
    async def test_creates_then_skips_duplicates(self, session: AsyncSession) -> None:
        """A second submission of the same posting is counted as a duplicate."""
        service = SubmissionService()
        parse = AsyncMock(return_value=[PARSED_JOB])

        with patch.object(submission_service.ai, "parse_job_posting", parse), patch.object(
            service, "_enqueue_followups"
        ) as enqueue:
            first = await service.process_submission(session, "Staff Nurse needed at Reddington...")
            second = await service.process_submission(session, "Staff Nurse needed at Reddington...")

        assert (first.created, first.duplicates) == (1, 0)
        assert (second.created, second.duplicates) == (0, 1)
        enqueue.assert_called_once()

        job = (await session.execute(select(Job))).scalar_one()
        assert job.slug == "reddington-hospital-staff-nurse"
        assert job.status == "active"
        assert job.deadline is not None
        assert job.duplicate_hash == build_duplicate_hash("Staff Nurse", PARSED_JOB["company"], None)

    @pytest.mark.asyncio
    async def test_nothing_found(self, session: AsyncSession) -> None:
        """Text with no postings is a NO_JOBS_FOUND error."""
        with patch.object(submission_service.ai, "parse_job_posting", AsyncMock(return_value=[])):
            with pytest.raises(BadRequestException) as exc_info:
                await SubmissionService().process_submission(session, "hello")
        assert exc_info.value.code == "NO_JOBS_FOUND"

    @pytest.mark.asyncio
    async def test_ai_failure(self, session: AsyncSession) -> None:
        """An AI failure surfaces as a 500 upstream error."""
        failing = AsyncMock(side_effect=RuntimeError("OpenAI unavailable"))
        with patch.object(submission_service.ai, "parse_job_posting", failing):
            with pytest.raises(ExternalServiceException) as exc_info:
                await SubmissionService().process_submission(session, "some posting")
        assert exc_info.value.status_code == 500


@pytest.mark.unit
class TestCategoryPages:
    """SEO landing pages."""

    def test_slug_and_title(self) -> None:
        """Location is appended when given."""
        assert category_slug("Healthcare & Medical") == "healthcare-medical-jobs"
        assert category_slug("Nursing", "Lagos") == "nursing-jobs-in-lagos"
        assert category_title("Nursing", "Lagos") == "Nursing Jobs in Lagos"

    @pytest.mark.asyncio
    async def test_create_then_refresh(self, session: AsyncSession) -> None:
        """The first call creates the page and later calls update its count."""
        session.add(make_job(sector="Healthcare & Medical", title="Nurse"))
        await session.commit()
        service = CategoryService()

        page = await service.create_or_refresh(session, "Healthcare & Medical", "Lagos")
        assert page.slug == "healthcare-medical-jobs-in-lagos"
        assert page.job_count == 1

        session.add(make_job(sector="Healthcare & Medical", title="Pharmacist"))
        await session.commit()
        await service.create_or_refresh(session, "Healthcare & Medical", "Lagos")

        pages = (await session.execute(select(CategoryPage))).scalars().all()
        assert len(pages) == 1
        assert pages[0].job_count == 2

    @pytest.mark.asyncio
    async def test_category_required(self, session: AsyncSession) -> None:
        """A blank category is rejected."""
        with pytest.raises(BadRequestException):
            await CategoryService().create_or_refresh(session, " ")


@pytest.mark.unit
class TestIndexNow:
    """Search-engine pings through httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_no_key(self) -> None:
        """Without a key nothing is sent."""
        with patch.object(settings, "indexnow_api_key", None):
            assert await IndexNowService().submit("nurse") is False

    @pytest.mark.asyncio
    async def test_accepted(self) -> None:
        """A 200 answer counts as submitted and the payload names the job URL."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with patch.object(settings, "indexnow_api_key", "abc123"):
                assert await IndexNowService(client).submit("reddington-staff-nurse") is True

        assert b"reddington-staff-nurse" in seen[0].content
        assert b"abc123.txt" in seen[0].content

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        """Transport errors are logged and reported as False."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with patch.object(settings, "indexnow_api_key", "abc123"):
                assert await IndexNowService(client).submit("nurse") is False
