"""
String / list / number normalisation used by matching and SEO slugs.
"""
import math
import re
from typing import Any, Iterable, List, Optional, Union

_WHITESPACE = re.compile(r"\s+")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def normalize_string(value: Any) -> str:
    """Trim, lower-case and collapse internal whitespace. None -> ''."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value).strip().lower())


def normalize_list(values: Union[Iterable[Any], str, None]) -> List[str]:
    """
    Normalise every element, drop empties, de-duplicate keeping first-seen order.

    A comma separated string is split first; anything that is neither a
    list/tuple/set nor a string yields [].
    """
    if isinstance(values, str):
        items: Iterable[Any] = values.split(",")
    elif isinstance(values, (list, tuple, set)):
        items = values
    else:
        return []

    seen = set()
    result = []
    for item in items:
        norm = normalize_string(item)
        if norm and norm not in seen:
            seen.add(norm)
            result.append(norm)
    return result


def to_numeric(value: Any) -> Optional[float]:
    """Parse salary-like values ("KES 150,000" -> 150000.0). Invalid -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def slugify(text: Any) -> str:
    """URL slug: lower-case, strip punctuation, spaces to dashes, no repeated dashes."""
    value = str(text or "").lower()
    value = re.sub(r"[^a-z0-9\s-]", "", value)
    value = re.sub(r"\s+", "-", value.strip())
    value = re.sub(r"-+", "-", value)
    return value.strip("-")


def location_slug(text: Any) -> str:
    """Slug used by the /jobs/state/... location pages."""
    value = str(text or "").lower().strip()
    value = re.sub(r"\s+", "-", value)
    return re.sub(r"[^a-z0-9-]", "", value)
