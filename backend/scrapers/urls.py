"""
Search URL builders for the supported job boards.

Indeed relies on query parameters with a zero-based result offset.
Naukri puts slugged keyword/location into the path and repeats them
as query parameters along with the page number.
"""

import re
from typing import Dict, Optional
from urllib.parse import urlencode, urlparse

INDEED_IN_BASE = 'https://in.indeed.com'
INDEED_GLOBAL_BASE = 'https://www.indeed.com'
NAUKRI_BASE = 'https://www.naukri.com'

INDEED_RESULTS_PER_PAGE = 10

# Optional Indeed filters, in the order they are appended
INDEED_FILTERS = ('radius', 'jt', 'explvl', 'fromage')

_JOB_KEY_RE = re.compile(r'[?&]jk=([a-f0-9]+)', re.IGNORECASE)


def _require(value: Optional[str], name: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{name} is required")
    return str(value).strip()


def calculate_start_index(page: int, per_page: int = INDEED_RESULTS_PER_PAGE) -> int:
    """Zero-based result offset for a 1-based page number."""
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    return (page - 1) * per_page


def indeed_base_for(target_url: Optional[str]) -> str:
    """Indeed origin matching the requested host (India vs global)."""
    if not target_url:
        return INDEED_IN_BASE
    if '://' not in target_url:
        target_url = 'https://' + target_url
    host = (urlparse(target_url).hostname or '').lower()
    return INDEED_IN_BASE if host == 'in.indeed.com' else INDEED_GLOBAL_BASE


def build_indeed_search_url(
    keyword: str,
    location: str,
    start: int = 0,
    filters: Optional[Dict[str, object]] = None,
    base_url: str = INDEED_IN_BASE
) -> str:
    """
    Build an Indeed search URL.

    Examples:
        ("Software Engineer", "Bengaluru") ->
            https://in.indeed.com/jobs?q=Software+Engineer&l=Bengaluru&sort=date
        ("python", "Pune", start=20) ->
            https://in.indeed.com/jobs?q=python&l=Pune&start=20&sort=date
    """
    params = [
        ('q', _require(keyword, 'keyword')),
        ('l', _require(location, 'location')),
    ]
    if start and start > 0:
        params.append(('start', str(start)))

    filters = filters or {}
    for name in INDEED_FILTERS:
        value = filters.get(name)
        if value not in (None, ''):
            params.append((name, str(value)))

    params.append(('sort', 'date'))
    return f"{base_url.rstrip('/')}/jobs?{urlencode(params)}"


def build_indeed_page_url(
    keyword: str,
    location: str,
    page: int,
    base_url: str = INDEED_IN_BASE
) -> str:
    return build_indeed_search_url(
        keyword, location, start=calculate_start_index(page), base_url=base_url
    )


def extract_indeed_job_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    match = _JOB_KEY_RE.search(url)
    return match.group(1) if match else None


def build_indeed_job_url(job_id: str, base_url: str = INDEED_GLOBAL_BASE) -> str:
    return f"{base_url.rstrip('/')}/viewjob?jk={job_id}"


def build_indeed_company_url(company_name: Optional[str]) -> Optional[str]:
    """
    Indeed company page for a display name.

    Examples:
        "Acme Corp (India)" -> https://www.indeed.com/cmp/acme-corp-india
    """
    if not company_name:
        return None
    slug = re.sub(r'[^a-z0-9]+', '-', company_name.lower()).strip('-')
    if not slug:
        return None
    return f"{INDEED_GLOBAL_BASE}/cmp/{slug}"


def slugify_segment(text: str) -> str:
    """
    Naukri path slug: lower-case, whitespace to hyphens, drop the rest.

    Examples:
        "Software Engineer" -> software-engineer
        "C++ Developer" -> c-developer
    """
    slug = re.sub(r'\s+', '-', text.lower())
    return re.sub(r'[^a-z0-9-]', '', slug)


def build_naukri_search_url(
    keyword: str,
    location: str,
    page: int = 1,
    base_url: str = NAUKRI_BASE
) -> str:
    """
    Build a Naukri search URL.

    Examples:
        ("Software Engineer", "Bengaluru", 2) ->
            https://www.naukri.com/software-engineer-jobs-in-bengaluru?k=Software+Engineer&l=Bengaluru&pageNo=2
    """
    keyword = _require(keyword, 'keyword')
    location = _require(location, 'location')
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")

    path = f"{slugify_segment(keyword)}-jobs-in-{slugify_segment(location)}"
    query = urlencode([('k', keyword), ('l', location), ('pageNo', str(page))])
    return f"{base_url.rstrip('/')}/{path}?{query}"
