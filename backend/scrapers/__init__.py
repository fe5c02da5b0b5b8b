"""
Job-listing scraper system.

This package provides:
- HTTP and headless-browser fetchers
- Selector-fallback extraction for Indeed and Naukri result pages
- A sequential run orchestrator and normalization pipeline
"""

from .base import (
    FetchStrategy,
    RunStatus,
    DedupeKey,
    ListingFragment,
    NormalizedListing,
    ScrapeRunConfig,
    ScrapeRunResult,
    ProgressEvent,
)
from .config import SITES, get_site_config, get_enabled_sites
from .manager import ScraperManager, ScrapeJob, select_adapter
from .runner import ScrapeRunner

__all__ = [
    'FetchStrategy',
    'RunStatus',
    'DedupeKey',
    'ListingFragment',
    'NormalizedListing',
    'ScrapeRunConfig',
    'ScrapeRunResult',
    'ProgressEvent',
    'SITES',
    'get_site_config',
    'get_enabled_sites',
    'ScraperManager',
    'ScrapeJob',
    'select_adapter',
    'ScrapeRunner',
]
