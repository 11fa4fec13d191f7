"""
Typed views over the loosely-shaped JSON columns on ``jobs``.

Older rows store ``company`` as a plain string, a JSON-encoded string or an
object, and ``location`` as ``"Town, State"`` or an object. Repositories and
services call the parsers below so nothing above the data layer has to care.
"""
import json
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

DEFAULT_COMPANY_NAME = "Confidential Employer"


@dataclass(frozen=True)
class CompanyRef:
    name: str
    website: Optional[str] = None
    industry: Optional[str] = None


@dataclass(frozen=True)
class JobLocation:
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    remote: bool = False

    @property
    def display(self) -> str:
        parts = [p for p in (self.city, self.state, self.country) if p]
        if self.remote:
            parts.append("Remote")
        return ", ".join(parts)

    def match_terms(self) -> List[str]:
        """Raw values compared against a user's preferred locations."""
        terms = [p for p in (self.city, self.state, self.country) if p]
        if self.remote:
            terms.append("remote")
        return terms


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_company(raw: Any) -> CompanyRef:
    """Accepts a name, a JSON object string, a dict or None."""
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("{"):
            try:
                raw = json.loads(text)
            except ValueError:
                return CompanyRef(name=text)
        else:
            return CompanyRef(name=text or DEFAULT_COMPANY_NAME)

    if isinstance(raw, dict):
        return CompanyRef(
            name=_clean(raw.get("name")) or DEFAULT_COMPANY_NAME,
            website=_clean(raw.get("website")),
            industry=_clean(raw.get("industry")),
        )
    return CompanyRef(name=DEFAULT_COMPANY_NAME)


def get_company_name(raw: Any) -> str:
    return parse_company(raw).name


def parse_location(raw: Any) -> JobLocation:
    if isinstance(raw, dict):
        return JobLocation(
            city=_clean(raw.get("city") or raw.get("town")),
            state=_clean(raw.get("state")),
            country=_clean(raw.get("country")),
            remote=bool(raw.get("remote")),
        )
    if isinstance(raw, str) and raw.strip():
        text = raw.strip()
        if text.lower() == "remote":
            return JobLocation(remote=True)
        if "," in text:
            town, state = text.split(",", 1)
            return JobLocation(city=_clean(town), state=_clean(state))
        return JobLocation(state=text)
    return JobLocation()


def application_email(application: Any) -> Optional[str]:
    """Recipient address from an ``application`` blob, without the mailto: prefix."""
    if not isinstance(application, dict):
        return None
    email = _clean(application.get("email"))
    if not email:
        return None
    if email.lower().startswith("mailto:"):
        email = email[len("mailto:"):].strip()
    return email or None


def extract_towns(locations: Iterable[Any]) -> Tuple[List[Tuple[str, int]], int]:
    """
    Count towns across job locations.

    Returns (towns sorted by count desc, number of state-only locations).
    """
    towns: Counter = Counter()
    state_only = 0
    for raw in locations:
        loc = parse_location(raw)
        if loc.city:
            towns[loc.city] += 1
        elif loc.state:
            state_only += 1
    return towns.most_common(), state_only
