"""Per-site schemas and adapter factories."""

from .indeed import INDEED_SCHEMA, create_indeed_http_scraper, create_indeed_browser_scraper
from .naukri import NAUKRI_SCHEMA, create_naukri_http_scraper, create_naukri_browser_scraper

__all__ = [
    'INDEED_SCHEMA',
    'NAUKRI_SCHEMA',
    'create_indeed_http_scraper',
    'create_indeed_browser_scraper',
    'create_naukri_http_scraper',
    'create_naukri_browser_scraper',
]
