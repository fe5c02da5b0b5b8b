"""
Scraper adapter: one site, one fetch strategy.

An adapter is assembled from a fetcher, a listing schema and a URL
builder rather than subclassed per site. The four concrete scrapers
(two job boards, two strategies) are built by the factories at the
bottom of this module.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional, Union

from .base import (
    AdapterStats,
    ErrorRecord,
    FetchStrategy,
    ListingFragment,
    ScrapeRunConfig,
    ValidationResult,
)
from .config import SiteConfig
from .crawlers.browser import BrowserFetcher
from .crawlers.static import HttpFetcher
from .errors import FetchError, ParameterValidationError
from .extraction import ListingSchema, extract_listings
from .runner import paginate

logger = logging.getLogger(__name__)

UrlBuilder = Callable[[str, str, int, str], str]
Params = Union[ScrapeRunConfig, Dict[str, Any]]


def _params_dict(params: Params) -> Dict[str, Any]:
    if isinstance(params, ScrapeRunConfig):
        return params.as_params()
    return dict(params or {})


class ScraperAdapter:
    """
    Binds a fetcher, an extractor schema and a URL builder for one site.

    Usage:
        adapter = create_indeed_http_scraper()
        fragments = await adapter.scrape({'keyword': 'python', 'location': 'Pune', 'max_pages': 2})
        stats = adapter.get_stats()
    """

    def __init__(
        self,
        site: SiteConfig,
        strategy: FetchStrategy,
        fetcher,
        schema: ListingSchema,
        url_builder: UrlBuilder,
        base_url: Optional[str] = None,
        page_delay: Optional[float] = None
    ):
        self.site = site
        self.strategy = strategy
        self.fetcher = fetcher
        self.schema = schema
        self.url_builder = url_builder
        self.base_url = base_url or site.base_url
        self.page_delay = site.page_delay_seconds if page_delay is None else page_delay
        self.stats = AdapterStats()
        self.logger = logging.getLogger(f"scraper.{self.name}")

    @property
    def name(self) -> str:
        mode = 'Browser' if self.strategy == FetchStrategy.BROWSER else 'Http'
        return f"{self.site.name}{mode}Scraper"

    def build_url(self, keyword: str, location: str, page: int) -> str:
        return self.url_builder(keyword, location, page, self.base_url)

    def validate_params(self, params: Params) -> ValidationResult:
        """Check keyword, location and the page bound for this site."""
        data = _params_dict(params)
        errors = []

        for name in ('keyword', 'location'):
            value = data.get(name)
            if not isinstance(value, str) or not value.strip():
                errors.append(f"{name} is required and must be a non-empty string")

        max_pages = data.get('max_pages', 1)
        if isinstance(max_pages, bool) or not isinstance(max_pages, int):
            errors.append("max_pages must be an integer")
        elif not 1 <= max_pages <= self.site.max_pages:
            errors.append(f"max_pages must be between 1 and {self.site.max_pages}")

        return ValidationResult(valid=not errors, errors=errors)

    @asynccontextmanager
    async def session(self):
        """Hold the fetcher's resources for the duration of a run."""
        try:
            await self.fetcher.open()
            yield self
        finally:
            await self.cleanup()

    async def cleanup(self):
        """Release fetcher resources. Safe to call more than once."""
        await self.fetcher.close()

    async def fetch_page(self, page: int, url: Optional[str] = None) -> List[ListingFragment]:
        """
        Fetch and extract one result page, recording the attempt.

        Raises:
            FetchError: Re-raised after being counted and recorded
        """
        self.stats.requests_attempted += 1
        try:
            document = await self.fetcher.fetch(url)
        except FetchError as e:
            self.stats.requests_failed += 1
            self.stats.errors.append(ErrorRecord(
                message=str(e),
                kind=e.kind.value,
                page=page,
                url=url,
            ))
            raise

        self.stats.requests_succeeded += 1
        fragments = extract_listings(document, self.schema, page)
        self.stats.fragments_extracted += len(fragments)
        return fragments

    async def scrape(self, params: Params) -> List[ListingFragment]:
        """
        Run pages 1..max_pages and return raw fragments in page order.

        Failed pages are recorded in the stats and skipped.

        Raises:
            ParameterValidationError: Before any network activity
            ResourceInitializationError: If the browser cannot start
        """
        validation = self.validate_params(params)
        if not validation.valid:
            raise ParameterValidationError(validation.errors)

        if not isinstance(params, ScrapeRunConfig):
            params = ScrapeRunConfig(
                search_keyword=params['keyword'],
                search_location=params['location'],
                max_pages=params.get('max_pages', 1),
                fetch_strategy=self.strategy,
                on_progress=params.get('on_progress'),
            )

        self.reset_stats()
        outcome = await paginate(self, params, continue_on_error=True)
        return outcome.fragments

    def get_stats(self) -> AdapterStats:
        return self.stats.snapshot()

    def reset_stats(self):
        self.stats.reset()

    async def health_check(self, keyword: str = 'software engineer', location: str = 'India') -> bool:
        """True when the first result page can be fetched."""
        url = self.build_url(keyword, location, 1)
        try:
            async with self.session():
                await self.fetcher.fetch(url)
            return True
        except FetchError as e:
            self.logger.warning(f"Health check failed: {e}")
            return False


def make_http_adapter(
    site: SiteConfig,
    schema: ListingSchema,
    url_builder: UrlBuilder,
    base_url: Optional[str] = None,
    page_delay: Optional[float] = None,
    timeout: Optional[float] = None,
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
    transport=None,
    **_ignored
) -> ScraperAdapter:
    fetcher = HttpFetcher(
        timeout=site.request_timeout if timeout is None else timeout,
        max_retries=site.max_retries if max_retries is None else max_retries,
        retry_delay=site.retry_delay if retry_delay is None else retry_delay,
        transport=transport,
    )
    return ScraperAdapter(
        site, FetchStrategy.HTTP, fetcher, schema, url_builder,
        base_url=base_url, page_delay=page_delay,
    )


def make_browser_adapter(
    site: SiteConfig,
    schema: ListingSchema,
    url_builder: UrlBuilder,
    base_url: Optional[str] = None,
    page_delay: Optional[float] = None,
    headless: bool = True,
    navigation_timeout: Optional[float] = None,
    settle_delay: Optional[float] = None,
    wait_timeout: Optional[float] = None,
    playwright_factory=None,
    **_ignored
) -> ScraperAdapter:
    fetcher = BrowserFetcher(
        headless=headless,
        navigation_timeout=site.request_timeout if navigation_timeout is None else navigation_timeout,
        settle_delay=site.settle_delay if settle_delay is None else settle_delay,
        wait_selector=schema.wait_selector,
        wait_timeout=site.card_wait_timeout if wait_timeout is None else wait_timeout,
        playwright_factory=playwright_factory,
    )
    return ScraperAdapter(
        site, FetchStrategy.BROWSER, fetcher, schema, url_builder,
        base_url=base_url, page_delay=page_delay,
    )
