"""
Naukri scraper definitions.

Naukri encodes the search in the path (``<keyword>-jobs-in-<location>``)
and repeats it as query parameters with ``pageNo``. Cards also carry
experience ranges and skill tags.
"""

from typing import Optional

from ..adapter import ScraperAdapter, make_browser_adapter, make_http_adapter
from ..config import get_site_config
from ..extraction import FieldRule, ListingSchema
from ..urls import build_naukri_search_url

NAUKRI_SCHEMA = ListingSchema(
    site='naukri',
    card_selectors=(
        'article.jobTuple',
        '.jobTuple',
        'article[data-job-id]',
        '.srp-jobtuple-wrapper',
    ),
    fields={
        'title': FieldRule(('.title', '.jobTuple-title', 'a.title', '.job-title')),
        'organization': FieldRule(('.compName', '.company-name', '.subTitle', '.comp-name')),
        'location': FieldRule(('.location', '.locWdth', '.loc', '.job-location')),
        'compensation': FieldRule(('.salary', '.salaryRange', '.sal')),
        'experience': FieldRule(('.experience', '.expwdth', '.exp')),
        'skills': FieldRule(('.tag-li', '.skillSet li', '.skill', '.tags'), multiple=True),
        'snippet': FieldRule(('.job-description', '.desc', '.job-details', '.ellipsis')),
        'detail_url': FieldRule(
            ('a.title', '.jobTuple-title a', 'a.job-title-link'),
            attribute='href',
        ),
    },
    id_attributes=('data-job-id', 'data-jobid'),
    id_selectors=('[data-job-id]',),
    detail_url_template='/job-listings-{id}',
)


def create_naukri_http_scraper(base_url: Optional[str] = None, **options) -> ScraperAdapter:
    """Naukri over plain HTTP."""
    return make_http_adapter(
        get_site_config('naukri'), NAUKRI_SCHEMA, build_naukri_search_url,
        base_url=base_url, **options
    )


def create_naukri_browser_scraper(base_url: Optional[str] = None, **options) -> ScraperAdapter:
    """Naukri through headless Chromium."""
    return make_browser_adapter(
        get_site_config('naukri'), NAUKRI_SCHEMA, build_naukri_search_url,
        base_url=base_url, **options
    )
