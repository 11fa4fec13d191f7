"""Tests for normalisation, JSON column parsing, HTML stripping and sectors."""

from __future__ import annotations

import pytest

from app.utils.html import html_to_text, strip_html
from app.utils.jobs import (
    DEFAULT_COMPANY_NAME,
    application_email,
    extract_towns,
    get_company_name,
    parse_location,
)
from app.utils.normalize import (
    location_slug,
    normalize_list,
    normalize_string,
    slugify,
    to_numeric,
)
from app.utils.sectors import SECTORS, are_sectors_related


@pytest.mark.unit
class TestNormalize:
    """String, list and number normalisation."""

    def test_normalize_string_collapses_whitespace(self) -> None:
        """Trims, lower-cases and collapses runs of whitespace."""
        assert normalize_string("  Senior   Backend\tEngineer ") == "senior backend engineer"

    def test_normalize_string_none(self) -> None:
        """None becomes the empty string."""
        assert normalize_string(None) == ""

    def test_normalize_list_dedupes_in_order(self) -> None:
        """Duplicates and empties are dropped, first-seen order is kept."""
        assert normalize_list(["Python", " python ", "", "SQL", None]) == ["python", "sql"]

    def test_normalize_list_splits_strings(self) -> None:
        """A comma separated string is split before normalising."""
        assert normalize_list("Python, SQL ,Docker") == ["python", "sql", "docker"]

    def test_normalize_list_rejects_other_types(self) -> None:
        """Numbers and dicts are not lists."""
        assert normalize_list(42) == []
        assert normalize_list({"a": 1}) == []

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("NGN 150,000", 150000.0),
            (250000, 250000.0),
            ("abc", None),
            (None, None),
            (True, None),
            (float("inf"), None),
        ],
    )
    def test_to_numeric(self, raw: object, expected: float | None) -> None:
        """Salary-like strings parse; junk and non-finite values do not."""
        assert to_numeric(raw) == expected

    def test_slugify(self) -> None:
        """Punctuation is stripped and spaces become single dashes."""
        assert slugify("  C++ / Rust Engineer!! ") == "c-rust-engineer"

    def test_location_slug(self) -> None:
        """Location slugs keep dashes and drop everything else."""
        assert location_slug("Port Harcourt") == "port-harcourt"
        assert location_slug("Abuja (FCT)") == "abuja-fct"


@pytest.mark.unit
class TestJobColumns:
    """Parsing of the loosely-shaped company/location/application columns."""

    def test_company_from_plain_string(self) -> None:
        """A plain string is the company name."""
        assert get_company_name("Andela") == "Andela"

    def test_company_from_json_string(self) -> None:
        """A JSON-encoded object string is decoded."""
        assert get_company_name('{"name": "Flutterwave"}') == "Flutterwave"

    def test_company_missing(self) -> None:
        """Missing or nameless companies fall back to the default name."""
        assert get_company_name(None) == DEFAULT_COMPANY_NAME
        assert get_company_name({"website": "https://x.example"}) == DEFAULT_COMPANY_NAME

    def test_location_from_town_state_string(self) -> None:
        """"Town, State" splits into city and state."""
        loc = parse_location("Ikeja, Lagos")
        assert loc.city == "Ikeja"
        assert loc.state == "Lagos"
        assert loc.display == "Ikeja, Lagos"

    def test_location_remote(self) -> None:
        """"Remote" and remote flags mark the location remote."""
        assert parse_location("Remote").remote is True
        loc = parse_location({"country": "Nigeria", "remote": True})
        assert loc.display == "Nigeria, Remote"
        assert "remote" in loc.match_terms()

    def test_application_email_strips_mailto(self) -> None:
        """The mailto: prefix is removed."""
        assert application_email({"email": "mailto:hr@acme.example"}) == "hr@acme.example"

    def test_application_email_missing(self) -> None:
        """No email, blank email or a non-dict blob all give None."""
        assert application_email({"url": "https://apply.example"}) is None
        assert application_email({"email": "  "}) is None
        assert application_email("hr@acme.example") is None

    def test_extract_towns(self) -> None:
        """Towns are counted, state-only locations are tallied separately."""
        towns, state_only = extract_towns(
            [
                {"city": "Ikeja", "state": "Lagos"},
                "Ikeja, Lagos",
                {"city": "Wuse", "state": "Abuja"},
                {"state": "Kano"},
            ]
        )
        assert towns[0] == ("Ikeja", 2)
        assert state_only == 1


@pytest.mark.unit
class TestHtml:
    """HTML to text conversion."""

    def test_strip_html_decodes_entities(self) -> None:
        """Tags are removed and entities decoded onto one line."""
        assert strip_html("<p>Fish &amp; Chips</p>\n<p>Daily</p>") == "Fish & Chips Daily"

    def test_strip_html_empty(self) -> None:
        """Empty input stays empty."""
        assert strip_html("") == ""

    def test_html_to_text_keeps_paragraphs(self) -> None:
        """Block elements become line breaks."""
        text = html_to_text("<p>Dear Hiring Manager,</p><p>I am applying.</p>")
        assert text.splitlines()[0] == "Dear Hiring Manager,"
        assert "I am applying." in text


@pytest.mark.unit
class TestSectors:
    """Sector relationships."""

    def test_related_in_either_direction(self) -> None:
        """Relationships are checked both ways."""
        assert are_sectors_related("Telecommunications", "Information Technology & Software")
        assert are_sectors_related("Information Technology & Software", "Telecommunications")

    def test_unrelated(self) -> None:
        """Unrelated and empty sectors are not related."""
        assert not are_sectors_related("Hospitality & Tourism", "Security & Defense")
        assert not are_sectors_related("", "Telecommunications")

    def test_sector_list_is_canonical(self) -> None:
        """Every related sector is itself a canonical sector."""
        from app.utils.sectors import SECTOR_RELATIONSHIPS

        for related in SECTOR_RELATIONSHIPS.values():
            assert set(related) <= set(SECTORS)
