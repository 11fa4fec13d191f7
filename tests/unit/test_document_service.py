"""Tests for CV and cover letter rendering and the PDF provider call."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import httpx
import pytest

from app.core.config import settings
from app.services import document_service
from app.services.document_service import (
    DocumentGenerationError,
    DocumentService,
    convert_html_to_pdf,
    render_cover_letter_html,
    render_cv_html,
)
from tests.mocks.mock_factories import make_job, make_profile

CV_DATA = {
    "personalDetails": {"name": "Jane <Doe>", "title": "Engineer", "email": "jane@example.com"},
    "summary": "Builds payment APIs & tooling.",
    "experience": [
        {"role": "Backend Engineer", "company": "Flutterwave", "years": "2020 - 2024", "bullets": ["Shipped <script>"]},
        "not-a-dict",
    ],
    "education": [{"degree": "BSc Computer Science", "institution": "UNILAG", "years": "2019"}],
    "skills": ["Python", "", "PostgreSQL"],
}


@pytest.mark.unit
class TestRendering:
    """HTML builders."""

    def test_cv_escapes_user_values(self) -> None:
        """Names and bullets are escaped and malformed entries skipped."""
        html = render_cv_html(CV_DATA)

        assert "Jane &lt;Doe&gt;" in html
        assert "Shipped &lt;script&gt;" in html
        assert "<script>" not in html
        assert "Builds payment APIs &amp; tooling." in html
        assert "Python, PostgreSQL" in html
        assert "not-a-dict" not in html

    def test_template_accent(self) -> None:
        """Unknown templates fall back to the default accent."""
        assert "#1e3a8a" in render_cv_html(CV_DATA, "template-3")
        assert render_cv_html(CV_DATA, "template-99") == render_cv_html(CV_DATA)

    def test_empty_sections_omitted(self) -> None:
        """Sections with no content do not render headings."""
        html = render_cv_html({"personalDetails": {"name": "Jane"}})
        assert "<h2>Experience</h2>" not in html
        assert "<h2>Profile</h2>" not in html

    def test_cover_letter(self) -> None:
        """Paragraphs, highlights and the sign-off are rendered in order."""
        html = render_cover_letter_html(
            {"opening": "Dear team,", "body1": "I love <APIs>.", "highlights": ["Led SRE"]},
            "Jane Doe",
        )
        assert html.startswith("<p>Dear team,</p><p>I love &lt;APIs&gt;.</p>")
        assert "<li>Led SRE</li>" in html
        assert html.endswith("<p>Kind regards,<br>Jane Doe</p>")


@pytest.mark.unit
class TestPdfConversion:
    """HTML-to-PDF provider calls through httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_requires_key(self) -> None:
        """No provider key is a configuration error."""
        with patch.object(settings, "pdf_service_api_key", None):
            with pytest.raises(RuntimeError, match="PDF_SERVICE_API_KEY"):
                await convert_html_to_pdf("<html></html>")

    @pytest.mark.asyncio
    async def test_posts_html(self) -> None:
        """The HTML is posted as A4 with basic auth and the PDF bytes returned."""
        seen: dict[str, object] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"%PDF-1.7")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with patch.object(settings, "pdf_service_api_key", "pdf-key"):
                pdf = await convert_html_to_pdf("<p>cv</p>", client)

        assert pdf == b"%PDF-1.7"
        assert str(seen["auth"]).startswith("Basic ")
        assert seen["body"] == {"source": "<p>cv</p>", "format": "A4", "margin": "0mm", "use_print": False}

    @pytest.mark.asyncio
    async def test_provider_error(self) -> None:
        """A non-200 answer is reported with its status."""
        transport = httpx.MockTransport(lambda request: httpx.Response(429, text="slow down"))
        async with httpx.AsyncClient(transport=transport) as client:
            with patch.object(settings, "pdf_service_api_key", "pdf-key"):
                with pytest.raises(RuntimeError, match="status 429"):
                    await convert_html_to_pdf("<p>cv</p>", client)


@pytest.mark.unit
class TestDocumentService:
    """Orchestration with the AI layer mocked."""

    @pytest.mark.asyncio
    async def test_generate(self) -> None:
        """CV, letter and subject come back together."""
        profile = make_profile(uuid4())
        job = make_job()
        letter = {"subject": "Backend Engineer - Jane Doe", "opening": "Hello,"}

        with patch.object(document_service.ai, "generate_cv_data", AsyncMock(return_value=CV_DATA)), patch.object(
            document_service.ai, "generate_cover_letter", AsyncMock(return_value=letter)
        ), patch.object(document_service, "convert_html_to_pdf", AsyncMock(return_value=b"%PDF")):
            documents = await DocumentService().generate(profile, job)

        assert documents.cv_pdf == b"%PDF"
        assert documents.cover_letter_subject == "Backend Engineer - Jane Doe"
        assert "Jane &lt;Doe&gt;" in documents.cover_letter_html
        assert documents.cv_pdf_base64 == "JVBERg=="

    @pytest.mark.asyncio
    async def test_ai_failure(self) -> None:
        """An AI failure says which step failed."""
        profile = make_profile(uuid4())
        failing = AsyncMock(side_effect=ValueError("bad json"))

        with patch.object(document_service.ai, "generate_cv_data", failing):
            with pytest.raises(DocumentGenerationError, match="Failed to generate CV"):
                await DocumentService().generate(profile, make_job())
