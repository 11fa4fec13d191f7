"""Tests for job search, slug resolution, related jobs and expiry."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import JobNotFoundException
from app.models.job import JOB_STATUS_ACTIVE, JOB_STATUS_EXPIRED, Job
from app.services.job_service import MAX_PAGE_SIZE, JobService, clamp_limit
from app.utils.dates import utcnow
from app.utils.slugs import generate_job_slug, parse_job_slug, unique_job_slug
from tests.mocks.mock_factories import make_job


@pytest.mark.unit
class TestSlugs:
    """Job slug helpers."""

    def test_generate_and_parse(self) -> None:
        """The id appended to a generated slug is recovered."""
        job_id = "3f2b8c1e-0d4a-4b7e-9a51-6c2d1e0f9a88"
        slug = generate_job_slug(job_id, "Senior Nurse", {"name": "LUTH"})
        assert slug == f"luth-senior-nurse-{job_id}"
        assert parse_job_slug(slug) == job_id

    def test_parse_numeric_suffix(self) -> None:
        """Legacy numeric ids are recovered too."""
        assert parse_job_slug("acme-driver-1234") == "1234"

    def test_parse_without_id(self) -> None:
        """A slug with no id gives None."""
        assert parse_job_slug("acme-driver") is None
        assert parse_job_slug("") is None

    @pytest.mark.asyncio
    async def test_unique_slug_counts_up(self, session: AsyncSession) -> None:
        """Taken slugs get -1, -2 ... appended."""
        first = await unique_job_slug(session, "Driver", "Acme")
        session.add(make_job(title="Driver", slug=first))
        await session.commit()

        second = await unique_job_slug(session, "Driver", "Acme")
        assert first == "acme-driver"
        assert second == "acme-driver-1"


@pytest.mark.unit
class TestSearch:
    """Filtering and pagination."""

    def test_clamp_limit(self) -> None:
        """Limits are clamped into 1..MAX_PAGE_SIZE."""
        assert clamp_limit(0) == 1
        assert clamp_limit(500) == MAX_PAGE_SIZE

    @pytest.mark.asyncio
    async def test_only_active_newest_first(self, session: AsyncSession) -> None:
        """Expired jobs are hidden and results are newest first."""
        now = utcnow()
        session.add_all(
            [
                make_job(title="Old", created_at=now - timedelta(days=2)),
                make_job(title="New", created_at=now),
                make_job(title="Gone", status=JOB_STATUS_EXPIRED),
            ]
        )
        await session.commit()

        page = await JobService().list_jobs(session)
        assert [item.title for item in page.items] == ["New", "Old"]
        assert page.total == 2
        assert page.pages == 1

    @pytest.mark.asyncio
    async def test_search_and_location_filters(self, session: AsyncSession) -> None:
        """Keyword search covers the company; location matches the JSON text."""
        session.add_all(
            [
                make_job(title="Accountant", company={"name": "Dangote"}, location="Kano"),
                make_job(title="Engineer", company={"name": "Paystack"}),
            ]
        )
        await session.commit()

        service = JobService()
        by_company = await service.list_jobs(session, search="dangote")
        by_location = await service.list_jobs(session, location="kano")
        assert [i.title for i in by_company.items] == ["Accountant"]
        assert [i.title for i in by_location.items] == ["Accountant"]

    @pytest.mark.asyncio
    async def test_remote_filter(self, session: AsyncSession) -> None:
        """remote=true keeps remote jobs only."""
        session.add_all(
            [
                make_job(title="Remote Dev", location={"country": "Nigeria", "remote": True}),
                make_job(title="Office Dev"),
            ]
        )
        await session.commit()

        page = await JobService().list_jobs(session, remote=True)
        assert [i.title for i in page.items] == ["Remote Dev"]

    @pytest.mark.asyncio
    async def test_pagination(self, session: AsyncSession) -> None:
        """Pages split the result set and report the page count."""
        session.add_all([make_job(title=f"Job {i}") for i in range(5)])
        await session.commit()

        page = await JobService().list_jobs(session, page=2, limit=2)
        assert len(page.items) == 2
        assert page.total == 5
        assert page.pages == 3


@pytest.mark.unit
class TestDetail:
    """Slug or id resolution."""

    @pytest.mark.asyncio
    async def test_by_uuid_slug_and_stored_slug(self, session: AsyncSession) -> None:
        """A bare id, a slug ending in the id and a stored slug all resolve."""
        job = make_job(slug="paystack-backend-engineer")
        session.add(job)
        await session.commit()

        service = JobService()
        for value in (str(job.id), f"anything-{job.id}", "paystack-backend-engineer"):
            detail = await service.get_job_detail(session, value)
            assert detail.id == job.id
        assert detail.can_auto_apply is True

    @pytest.mark.asyncio
    async def test_unknown(self, session: AsyncSession) -> None:
        """Nothing matching raises JOB_NOT_FOUND."""
        with pytest.raises(JobNotFoundException):
            await JobService().get_job_detail(session, "no-such-job")

    @pytest.mark.asyncio
    async def test_related_same_sector(self, session: AsyncSession) -> None:
        """Related jobs share the sector and exclude the job itself."""
        job = make_job(sector="Healthcare & Medical")
        sibling = make_job(title="Nurse", sector="Healthcare & Medical")
        other = make_job(title="Driver", sector="Logistics, Transport & Supply Chain")
        session.add_all([job, sibling, other])
        await session.commit()

        related = await JobService().related_jobs(session, job.id)
        assert [r.title for r in related] == ["Nurse"]


@pytest.mark.unit
class TestExpiry:
    """Nightly expiry."""

    @pytest.mark.asyncio
    async def test_expires_old_and_past_deadline(self, session: AsyncSession) -> None:
        """Jobs past the age cutoff or their deadline are expired."""
        now = utcnow()
        session.add_all(
            [
                make_job(title="Fresh"),
                make_job(title="Stale", created_at=now - timedelta(days=45)),
                make_job(title="Closed", deadline=now - timedelta(days=1)),
            ]
        )
        await session.commit()

        assert await JobService().expire_old_jobs(session) == 2

        rows = (await session.execute(select(Job.title, Job.status))).all()
        statuses = {title: status for title, status in rows}
        assert statuses == {
            "Fresh": JOB_STATUS_ACTIVE,
            "Stale": JOB_STATUS_EXPIRED,
            "Closed": JOB_STATUS_EXPIRED,
        }
