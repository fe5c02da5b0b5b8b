"""
Data normalization utilities for scrapers.

These functions standardize scraped listing text into consistent formats.
Every function here is idempotent: applying it to its own output is a no-op.
"""

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

_WHITESPACE_RE = re.compile(r'\s+')
_PARENTHETICAL_RE = re.compile(r'\(.*?\)')
_LEADING_IN_RE = re.compile(r'^(?:in\s+)+', re.IGNORECASE)
_COMMA_RE = re.compile(r'\s*,\s*')

# UTF-8 bullet decoded as cp1252, seen in Indeed location strings
_MOJIBAKE_BULLET = 'â€¢'


def clean_text(text: Optional[str]) -> Optional[str]:
    """
    Trim and collapse internal whitespace and newlines.

    Examples:
        "  Senior\\n  Engineer " -> "Senior Engineer"
        "   " -> None
    """
    if text is None:
        return None
    cleaned = _WHITESPACE_RE.sub(' ', str(text)).strip()
    return cleaned or None


def normalize_organization(name: Optional[str]) -> Optional[str]:
    """
    Strip parenthetical noise such as review counts.

    Examples:
        "Acme Corp (4.1 reviews)" -> "Acme Corp"
        "Globex  (1,204)  Ltd" -> "Globex Ltd"
    """
    name = clean_text(name)
    if not name:
        return None
    return clean_text(_PARENTHETICAL_RE.sub('', name))


def normalize_location(location: Optional[str]) -> Optional[str]:
    """
    Drop a leading "in " token and turn bullets into commas.

    Examples:
        "in Bengaluru, Karnataka" -> "Bengaluru, Karnataka"
        "Pune â€¢ Remote" -> "Pune, Remote"
    """
    location = clean_text(location)
    if not location:
        return None
    location = location.replace(_MOJIBAKE_BULLET, ',').replace('•', ',')
    location = _COMMA_RE.sub(', ', location).strip(' ,')
    # Last, so no later step can expose another leading "in "
    location = _LEADING_IN_RE.sub('', location)
    return clean_text(location)


def absolute_url(url: Optional[str], base_url: Optional[str]) -> Optional[str]:
    """
    Resolve a possibly relative URL against a base.

    Returns None unless the result is a well-formed http(s) URL with a host.

    Examples:
        ("/viewjob?jk=abc", "https://in.indeed.com") -> "https://in.indeed.com/viewjob?jk=abc"
        ("javascript:void(0)", "https://in.indeed.com") -> None
    """
    url = clean_text(url)
    if not url:
        return None
    try:
        resolved = urljoin(base_url or '', url)
        parsed = urlparse(resolved)
        if parsed.scheme not in ('http', 'https') or not parsed.hostname:
            return None
    except ValueError:
        return None
    return resolved
