"""
Scraper Manager - selects adapters and runs scrape jobs.

Adapter selection is a pure lookup on (site derived from the target
URL's domain, fetch strategy). Batches run sequentially with a delay
between jobs so only one browser process exists at a time.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
import logging

from .adapter import ScraperAdapter
from .base import (
    Colors,
    DedupeKey,
    FetchStrategy,
    ProgressCallback,
    RunStatus,
    ScrapeRunConfig,
    ScrapeRunResult,
    utc_now,
)
from .config import SITES, get_site_config, resolve_site_key
from .errors import ScraperError, UnsupportedSiteError, coarse_reason
from .runner import ScrapeRunner
from .sites.indeed import create_indeed_browser_scraper, create_indeed_http_scraper
from .sites.naukri import create_naukri_browser_scraper, create_naukri_http_scraper
from .urls import indeed_base_for

logger = logging.getLogger(__name__)


# Registry of concrete adapters, one per (site, strategy)
ADAPTER_FACTORIES: Dict[Tuple[str, FetchStrategy], Callable[..., ScraperAdapter]] = {
    ('indeed', FetchStrategy.HTTP): create_indeed_http_scraper,
    ('indeed', FetchStrategy.BROWSER): create_indeed_browser_scraper,
    ('naukri', FetchStrategy.HTTP): create_naukri_http_scraper,
    ('naukri', FetchStrategy.BROWSER): create_naukri_browser_scraper,
}

DEFAULT_TARGETS = {
    'indeed': 'https://in.indeed.com',
    'naukri': 'https://www.naukri.com',
}


def select_adapter(
    target_url: str,
    strategy: FetchStrategy = FetchStrategy.HTTP,
    **options
) -> Optional[ScraperAdapter]:
    """
    Build the adapter for a target URL and strategy.

    Returns:
        A new adapter, or None when the domain is not supported
    """
    site_key = resolve_site_key(target_url)
    factory = ADAPTER_FACTORIES.get((site_key, strategy)) if site_key else None
    if factory is None:
        return None
    if site_key == 'indeed' and 'base_url' not in options:
        options['base_url'] = indeed_base_for(target_url)
    return factory(**options)


@dataclass
class ScrapeJob:
    """One named scrape request."""
    name: str
    target_url: str
    keyword: str
    location: str
    max_pages: int = 5
    fetch_strategy: FetchStrategy = FetchStrategy.HTTP
    continue_on_error: Optional[bool] = None  # None: False for single jobs, True in batches
    dedupe_by: DedupeKey = DedupeKey.EXTERNAL_ID
    on_progress: Optional[ProgressCallback] = None

    def to_config(self) -> ScrapeRunConfig:
        return ScrapeRunConfig(
            search_keyword=self.keyword,
            search_location=self.location,
            max_pages=self.max_pages,
            fetch_strategy=self.fetch_strategy,
            on_progress=self.on_progress,
            dedupe_by=self.dedupe_by,
        )


class ScraperManager:
    """
    Runs scrape jobs and keeps their results.

    Usage:
        manager = ScraperManager(adapter_options={'headless': True})

        # Run single job
        result = await manager.run_job(ScrapeJob('py', 'https://in.indeed.com', 'python', 'Pune'))

        # Run several jobs, one after another
        results = await manager.run_batch(jobs)
    """

    def __init__(self, adapter_options: Optional[Dict] = None, page_delay: Optional[float] = None):
        """
        Initialize the scraper manager.

        Args:
            adapter_options: Keyword options passed to every adapter factory
            page_delay: Override for the per-site delay between pages
        """
        self.adapter_options = dict(adapter_options or {})
        self.page_delay = page_delay
        self.results: Dict[str, ScrapeRunResult] = {}

    def get_adapter(self, job: ScrapeJob) -> ScraperAdapter:
        adapter = select_adapter(job.target_url, job.fetch_strategy, **self.adapter_options)
        if adapter is None:
            raise UnsupportedSiteError(job.target_url)
        return adapter

    async def run_job(self, job: ScrapeJob, default_continue_on_error: bool = False) -> ScrapeRunResult:
        """
        Run a single job.

        Raises:
            UnsupportedSiteError: No adapter for the target URL
            ParameterValidationError: Invalid keyword, location or page count
            ResourceInitializationError: Browser could not be started
        """
        adapter = self.get_adapter(job)
        runner = ScrapeRunner(
            adapter,
            continue_on_error=(
                default_continue_on_error if job.continue_on_error is None else job.continue_on_error
            ),
            page_delay=self.page_delay,
            job_name=job.name,
        )
        result = await runner.run(job.to_config())
        self.results[job.name] = result
        return result

    def _failed_result(self, job: ScrapeJob, error: Exception) -> ScrapeRunResult:
        now = utc_now()
        return ScrapeRunResult(
            job_name=job.name,
            site=resolve_site_key(job.target_url) or 'unknown',
            strategy=job.fetch_strategy,
            started_at=now,
            completed_at=now,
            status=RunStatus.FAILED,
            message=coarse_reason(error),
        )

    async def run_batch(
        self,
        jobs: List[ScrapeJob],
        stop_on_error: bool = False,
        inter_job_delay: float = 5.0
    ) -> List[ScrapeRunResult]:
        """
        Run jobs sequentially.

        Args:
            jobs: Jobs to run; page errors are skipped within each job
            stop_on_error: Stop the batch at the first failed job
            inter_job_delay: Seconds to wait between jobs

        Returns:
            One result per job that was started
        """
        logger.info(f"Starting batch of {len(jobs)} jobs")
        results = []

        for index, job in enumerate(jobs):
            try:
                result = await self.run_job(job, default_continue_on_error=True)
            except ScraperError as e:
                logger.error(f"Job {job.name} failed: {e}")
                result = self._failed_result(job, e)
                self.results[job.name] = result
            results.append(result)

            if result.status == RunStatus.FAILED and stop_on_error:
                logger.warning(f"Stopping batch after failed job: {job.name}")
                break
            if index < len(jobs) - 1 and inter_job_delay > 0:
                await asyncio.sleep(inter_job_delay)

        self._log_batch_summary(results)
        return results

    def _log_batch_summary(self, results: List[ScrapeRunResult]):
        logger.info("=" * 60)
        logger.info(Colors.bold("Batch summary"))
        for result in results:
            status = result.status.value
            status = Colors.red(status) if result.status == RunStatus.FAILED else Colors.green(status)
            logger.info(f"  {result.job_name}: {status}, {len(result.listings)} listings")
        total = sum(len(r.listings) for r in results)
        logger.info(f"  Total listings: {total}")
        logger.info("=" * 60)

    def list_scrapers(self) -> List[Dict]:
        """
        List every site and the strategies it supports.

        Returns:
            List of site info dictionaries
        """
        scrapers = []
        for key, config in SITES.items():
            strategies = [s.value for s in FetchStrategy if (key, s) in ADAPTER_FACTORIES]
            scrapers.append({
                'key': key,
                'name': config.name,
                'url': DEFAULT_TARGETS.get(key, config.base_url),
                'enabled': config.enabled,
                'max_pages': config.max_pages,
                'strategies': strategies,
            })
        return scrapers

    def get_results_summary(self) -> Dict:
        """
        Get summary of all run results.

        Returns:
            Summary dictionary with totals
        """
        if not self.results:
            return {
                'total_jobs': 0,
                'completed': 0,
                'partial': 0,
                'failed': 0,
                'total_listings': 0,
            }

        def count(status: RunStatus) -> int:
            return sum(1 for r in self.results.values() if r.status == status)

        return {
            'total_jobs': len(self.results),
            'completed': count(RunStatus.COMPLETED),
            'partial': count(RunStatus.PARTIAL),
            'failed': count(RunStatus.FAILED),
            'total_listings': sum(len(r.listings) for r in self.results.values()),
            'jobs': {k: v.to_dict(include_listings=False) for k, v in self.results.items()},
        }


def target_url_for(site_key: str) -> str:
    """Default target URL for a site key."""
    get_site_config(site_key)
    return DEFAULT_TARGETS[site_key]
