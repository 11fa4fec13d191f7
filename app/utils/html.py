"""
HTML to text for feeds and plain-text email parts.
"""
import re

from bs4 import BeautifulSoup

_BLANK_LINES = re.compile(r"\n{3,}")
_SPACES = re.compile(r"[ \t]+")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def strip_html(html: str) -> str:
    """Remove tags and decode entities, collapsing everything to one line."""
    if not html:
        return ""
    text = _soup(html).get_text(" ")
    return re.sub(r"\s+", " ", text).strip()


def html_to_text(html: str) -> str:
    """Readable plain text: block elements become line breaks."""
    if not html:
        return ""
    soup = _soup(html)
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(["p", "li", "div", "h1", "h2", "h3", "tr"]):
        block.append("\n")
    lines = (_SPACES.sub(" ", line).strip() for line in soup.get_text().splitlines())
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()
