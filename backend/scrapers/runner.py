"""
Job orchestrator: drives one scrape run from parameters to result.

Pages are fetched strictly in sequence. A run ends when max_pages is
reached, when the site stops returning listings, or on a fetch error
that the caller did not ask to tolerate.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from .base import (
    Colors,
    DedupeKey,
    FetchStrategy,
    ListingFragment,
    ProgressEvent,
    RunStatistics,
    RunStatus,
    ScrapeRunConfig,
    ScrapeRunResult,
    utc_now,
)
from .errors import FetchError, ParameterValidationError, coarse_reason
from .pipeline import process_fragments

if TYPE_CHECKING:
    from .adapter import ScraperAdapter

logger = logging.getLogger(__name__)

# Consecutive empty pages that mean "no more results".
# Browser fetches already wait for cards to render, so one empty page is enough.
EARLY_STOP_THRESHOLDS: Dict[FetchStrategy, int] = {
    FetchStrategy.HTTP: 2,
    FetchStrategy.BROWSER: 1,
}

# Tolerated pages in a row that fail when errors are being skipped
MAX_CONSECUTIVE_ERRORS = 3


@dataclass
class PaginationOutcome:
    fragments: List[ListingFragment] = field(default_factory=list)
    pages_scraped: int = 0
    stopped_early: bool = False
    fatal_error: Optional[FetchError] = None
    last_error: Optional[FetchError] = None


def emit_progress(config: ScrapeRunConfig, page: int, found: int):
    """Call the observer synchronously; its failures never abort the run."""
    if config.on_progress is None:
        return
    event = ProgressEvent(
        current_page=page,
        total_pages=config.max_pages,
        cumulative_listings_found=found,
    )
    try:
        config.on_progress(event)
    except Exception as e:
        logger.warning(f"Progress callback raised: {e}")


async def paginate(
    adapter: 'ScraperAdapter',
    config: ScrapeRunConfig,
    continue_on_error: bool = False,
    page_delay: Optional[float] = None,
    max_consecutive_errors: int = MAX_CONSECUTIVE_ERRORS
) -> PaginationOutcome:
    """
    Fetch pages 1..max_pages through an adapter.

    The adapter's resources are acquired once for the whole loop and
    always released, whichever way the loop exits.

    Args:
        adapter: Adapter to drive
        config: Run parameters
        continue_on_error: Skip failed pages instead of aborting
        page_delay: Seconds between pages (defaults to the adapter's)
        max_consecutive_errors: Give up after this many failed pages in a row

    Returns:
        PaginationOutcome; fatal_error is set when the loop aborted
    """
    threshold = EARLY_STOP_THRESHOLDS[adapter.strategy]
    delay = adapter.page_delay if page_delay is None else page_delay
    log = adapter.logger
    outcome = PaginationOutcome()
    empty_pages = 0
    consecutive_errors = 0

    async with adapter.session():
        for page in range(1, config.max_pages + 1):
            url = adapter.build_url(config.search_keyword, config.search_location, page)
            log.info(f"Page {page}/{config.max_pages}: {Colors.gray(url)}")

            try:
                fragments = await adapter.fetch_page(page, url)
            except FetchError as e:
                consecutive_errors += 1
                outcome.last_error = e
                log.warning(f"{Colors.red('✗')} Page {page} failed: {e}")
                if not continue_on_error:
                    outcome.fatal_error = e
                    break
                emit_progress(config, page, len(outcome.fragments))
                if consecutive_errors >= max_consecutive_errors:
                    log.warning(f"Stopping after {consecutive_errors} consecutive failed pages")
                    outcome.stopped_early = True
                    break
            else:
                consecutive_errors = 0
                outcome.pages_scraped += 1
                outcome.fragments.extend(fragments)
                log.info(f"{Colors.green('✓')} Page {page}: {len(fragments)} listings")
                emit_progress(config, page, len(outcome.fragments))

                if fragments:
                    empty_pages = 0
                else:
                    empty_pages += 1
                    if empty_pages >= threshold:
                        log.info(f"No more results after page {page}, stopping early")
                        outcome.stopped_early = True
                        break

            if page < config.max_pages and delay > 0:
                await asyncio.sleep(delay)

    return outcome


class ScrapeRunner:
    """
    Runs one scrape job and builds its ScrapeRunResult.

    Usage:
        runner = ScrapeRunner(create_naukri_http_scraper(), continue_on_error=True)
        result = await runner.run(ScrapeRunConfig('python', 'Pune', max_pages=3))
    """

    def __init__(
        self,
        adapter: 'ScraperAdapter',
        continue_on_error: bool = False,
        page_delay: Optional[float] = None,
        job_name: Optional[str] = None
    ):
        self.adapter = adapter
        self.continue_on_error = continue_on_error
        self.page_delay = page_delay
        self.job_name = job_name or adapter.name
        self.status = RunStatus.PENDING

    async def run(self, config: ScrapeRunConfig) -> ScrapeRunResult:
        """
        Execute the run.

        Raises:
            ParameterValidationError: Before any network activity
            ResourceInitializationError: After partial resources are released
        """
        adapter = self.adapter
        result = ScrapeRunResult(
            job_name=self.job_name,
            site=adapter.site.key,
            strategy=adapter.strategy,
            started_at=utc_now(),
        )

        validation = adapter.validate_params(config)
        if not validation.valid:
            raise ParameterValidationError(validation.errors)

        self.status = result.status = RunStatus.RUNNING
        adapter.reset_stats()
        logger.info(
            f"Starting {Colors.bold(self.job_name)}: '{config.search_keyword}' in "
            f"'{config.search_location}' ({config.max_pages} pages, {adapter.strategy.value})"
        )

        try:
            outcome = await paginate(
                adapter,
                config,
                continue_on_error=self.continue_on_error,
                page_delay=self.page_delay,
            )
        except Exception:
            self.status = result.status = RunStatus.FAILED
            raise
        stats = adapter.get_stats()

        result.errors = stats.errors
        result.statistics = RunStatistics(
            requests_attempted=stats.requests_attempted,
            requests_succeeded=stats.requests_succeeded,
            requests_failed=stats.requests_failed,
            pages_scraped=outcome.pages_scraped,
            fragments_extracted=stats.fragments_extracted,
            stopped_early=outcome.stopped_early,
        )

        if outcome.fatal_error is not None:
            result.status = RunStatus.FAILED
            result.message = coarse_reason(outcome.fatal_error)
        elif stats.requests_failed and not stats.requests_succeeded:
            result.status = RunStatus.FAILED
            result.message = coarse_reason(outcome.last_error)
        else:
            processed = process_fragments(
                outcome.fragments,
                base_url=adapter.base_url,
                dedupe_by=config.dedupe_by or DedupeKey.EXTERNAL_ID,
            )
            result.listings = processed.listings
            result.statistics.duplicates_removed = processed.stats.duplicates_removed
            result.statistics.invalid_removed = processed.stats.invalid_removed
            result.status = RunStatus.PARTIAL if stats.requests_failed else RunStatus.COMPLETED

        result.statistics.final_count = len(result.listings)
        result.completed_at = utc_now()
        result.statistics.duration_seconds = result.duration_seconds
        self.status = result.status

        self._log_summary(result)
        return result

    def _log_summary(self, result: ScrapeRunResult):
        s = result.statistics
        colour = {
            RunStatus.COMPLETED: Colors.green,
            RunStatus.PARTIAL: Colors.yellow,
            RunStatus.FAILED: Colors.red,
        }.get(result.status, Colors.gray)
        logger.info(
            f"{Colors.bold(self.job_name)} {colour(result.status.value)}: "
            f"{s.final_count} listings from {s.pages_scraped} pages "
            f"({s.requests_failed} failed requests, {s.duplicates_removed} duplicates, "
            f"{s.invalid_removed} invalid) in {s.duration_seconds or 0:.1f}s"
        )

