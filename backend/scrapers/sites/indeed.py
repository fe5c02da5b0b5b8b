"""
Indeed scraper definitions.

Indeed search is driven entirely by query parameters with a zero-based
``start`` offset of 10 results per page. Result cards have gone through
several markup generations, so each field lists the known variants from
newest to oldest.
"""

from typing import Optional

from ..adapter import ScraperAdapter, make_browser_adapter, make_http_adapter
from ..config import get_site_config
from ..extraction import FieldRule, ListingSchema
from ..urls import build_indeed_page_url, extract_indeed_job_id

INDEED_SCHEMA = ListingSchema(
    site='indeed',
    card_selectors=(
        '.jobsearch-SerpJobCard',
        '.job_seen_beacon',
        '.resultContent',
        '[data-jk]',
        '.cardOutline',
    ),
    fields={
        'title': FieldRule((
            '.jobTitle',
            'h2.jobTitle',
            '.jcs-JobTitle',
            '[data-testid="job-title"]',
        )),
        'organization': FieldRule((
            '.companyName',
            '[data-testid="company-name"]',
            '.company',
            '.companyInfo .companyName',
        )),
        'location': FieldRule((
            '.companyLocation',
            '[data-testid="text-location"]',
            '.location',
            '.companyInfo .companyLocation',
        )),
        'compensation': FieldRule((
            '.salary-snippet',
            '.salaryText',
            '[data-testid="salary-snippet"]',
        )),
        'snippet': FieldRule((
            '.job-snippet',
            '[data-testid="job-snippet"]',
            '.summary',
        )),
        'detail_url': FieldRule((
            'a.jcs-JobTitle',
            'h2.jobTitle a',
            'a[data-jk]',
            'a[id^="job_"]',
        ), attribute='href'),
    },
    id_attributes=('data-jk', 'data-job-id', 'id'),
    id_selectors=('[data-jk]',),
    detail_url_template='/viewjob?jk={id}',
    wait_selectors=('.jobsearch-SerpJobCard', '.job_seen_beacon', '.resultContent'),
    id_from_url=extract_indeed_job_id,
)


def create_indeed_http_scraper(base_url: Optional[str] = None, **options) -> ScraperAdapter:
    """Indeed over plain HTTP."""
    return make_http_adapter(
        get_site_config('indeed'), INDEED_SCHEMA, build_indeed_page_url,
        base_url=base_url, **options
    )


def create_indeed_browser_scraper(base_url: Optional[str] = None, **options) -> ScraperAdapter:
    """Indeed through headless Chromium."""
    return make_browser_adapter(
        get_site_config('indeed'), INDEED_SCHEMA, build_indeed_page_url,
        base_url=base_url, **options
    )
