"""
Tests for adapter selection and job/batch execution in ScraperManager.
"""

import asyncio

import httpx
import pytest

from scrapers.base import FetchStrategy, RunStatus
from scrapers.crawlers.browser import BrowserFetcher
from scrapers.crawlers.static import HttpFetcher
from scrapers.errors import UnsupportedSiteError
from scrapers.manager import ScrapeJob, ScraperManager, select_adapter, target_url_for
from fakes import indeed_card, results_page


def job_board_transport():
    """Indeed answers with one card per page; Naukri blocks every request."""
    def handler(request):
        if request.url.host.endswith('naukri.com'):
            return httpx.Response(403, text="Access Denied")
        start = request.url.params.get('start', '0')
        html = results_page(indeed_card(f"jk{start}", f"Engineer {start}", "Acme"))
        return httpx.Response(200, text=html)
    return httpx.MockTransport(handler)


def make_manager():
    return ScraperManager(adapter_options={
        'transport': job_board_transport(),
        'page_delay': 0,
        'max_retries': 0,
        'retry_delay': 0,
    })


class TestSelectAdapter:
    """Test (site, strategy) routing."""

    @pytest.mark.parametrize("url,strategy,name,fetcher_type", [
        ("https://in.indeed.com/jobs", FetchStrategy.HTTP, "IndeedHttpScraper", HttpFetcher),
        ("https://in.indeed.com", FetchStrategy.BROWSER, "IndeedBrowserScraper", BrowserFetcher),
        ("https://www.naukri.com/", FetchStrategy.HTTP, "NaukriHttpScraper", HttpFetcher),
        ("naukri.com", FetchStrategy.BROWSER, "NaukriBrowserScraper", BrowserFetcher),
    ])
    def test_supported_combinations(self, url, strategy, name, fetcher_type):
        adapter = select_adapter(url, strategy)

        assert adapter.name == name
        assert adapter.strategy == strategy
        assert isinstance(adapter.fetcher, fetcher_type)

    def test_unknown_domain(self):
        assert select_adapter("https://www.linkedin.com/jobs") is None
        assert select_adapter("") is None

    def test_lookalike_domain_is_not_matched(self):
        assert select_adapter("https://notindeed.com") is None

    def test_indeed_base_follows_host(self):
        assert select_adapter("https://in.indeed.com").base_url == "https://in.indeed.com"
        assert select_adapter("https://www.indeed.com").base_url == "https://www.indeed.com"

    def test_new_adapter_each_call(self):
        assert select_adapter("https://in.indeed.com") is not select_adapter("https://in.indeed.com")

    def test_browser_card_selector_comes_from_schema(self):
        adapter = select_adapter("https://in.indeed.com", FetchStrategy.BROWSER)
        assert '.job_seen_beacon' in adapter.fetcher.wait_selector


class TestRunJob:
    """Test running a single job."""

    def test_successful_job(self):
        manager = make_manager()
        job = ScrapeJob('indeed-python', 'https://in.indeed.com', 'python', 'Pune', max_pages=2)

        result = asyncio.run(manager.run_job(job))

        assert result.status == RunStatus.COMPLETED
        assert result.job_name == 'indeed-python'
        assert [l.external_id for l in result.listings] == ["jk0", "jk10"]
        assert result.listings[0].detail_url == "https://in.indeed.com/rc/clk?jk=jk0&from=serp"
        assert manager.results['indeed-python'] is result

    def test_single_job_stops_at_first_error(self):
        manager = make_manager()
        job = ScrapeJob('naukri-java', 'https://www.naukri.com', 'java', 'Delhi', max_pages=3)

        result = asyncio.run(manager.run_job(job))

        assert result.status == RunStatus.FAILED
        assert len(result.errors) == 1

    def test_unsupported_site(self):
        manager = make_manager()
        job = ScrapeJob('linkedin', 'https://www.linkedin.com', 'python', 'Pune')

        with pytest.raises(UnsupportedSiteError):
            asyncio.run(manager.run_job(job))

    def test_job_to_config(self):
        job = ScrapeJob('j', 'https://www.naukri.com', 'python', 'Pune', max_pages=3,
                        fetch_strategy=FetchStrategy.BROWSER)
        config = job.to_config()

        assert config.search_keyword == 'python'
        assert config.search_location == 'Pune'
        assert config.max_pages == 3
        assert config.fetch_strategy == FetchStrategy.BROWSER


class TestRunBatch:
    """Test sequential batches."""

    def _jobs(self):
        return [
            ScrapeJob('indeed', 'https://in.indeed.com', 'python', 'Pune', max_pages=2),
            ScrapeJob('naukri', 'https://www.naukri.com', 'java', 'Delhi', max_pages=2),
            ScrapeJob('linkedin', 'https://www.linkedin.com', 'go', 'Noida'),
        ]

    def test_failures_are_recorded_not_raised(self):
        manager = make_manager()

        results = asyncio.run(manager.run_batch(self._jobs(), inter_job_delay=0))

        assert [r.status for r in results] == [RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.FAILED]
        # Page errors are skipped inside a batch, so both Naukri pages were tried
        assert len(results[1].errors) == 2
        assert results[1].message == "Access blocked by the job site"
        assert results[2].message == "Unsupported job site"
        assert results[2].site == 'unknown'

    def test_stop_on_error(self):
        manager = make_manager()

        results = asyncio.run(manager.run_batch(self._jobs(), stop_on_error=True, inter_job_delay=0))

        assert [r.job_name for r in results] == ['indeed', 'naukri']

    def test_explicit_continue_on_error_wins(self):
        manager = make_manager()
        job = ScrapeJob('naukri', 'https://www.naukri.com', 'java', 'Delhi', max_pages=2,
                        continue_on_error=False)

        results = asyncio.run(manager.run_batch([job], inter_job_delay=0))

        assert len(results[0].errors) == 1

    def test_results_summary(self):
        manager = make_manager()
        assert manager.get_results_summary()['total_jobs'] == 0

        asyncio.run(manager.run_batch(self._jobs(), inter_job_delay=0))
        summary = manager.get_results_summary()

        assert summary['total_jobs'] == 3
        assert summary['completed'] == 1
        assert summary['failed'] == 2
        assert summary['partial'] == 0
        assert summary['total_listings'] == 2
        assert 'listings' not in summary['jobs']['indeed']


class TestListScrapers:
    """Test scraper discovery."""

    def test_lists_both_sites(self):
        scrapers = {s['key']: s for s in ScraperManager().list_scrapers()}

        assert set(scrapers) == {'indeed', 'naukri'}
        assert scrapers['indeed']['strategies'] == ['http', 'browser']
        assert scrapers['naukri']['url'] == 'https://www.naukri.com'
        assert scrapers['naukri']['max_pages'] == 20

    def test_target_url_for(self):
        assert target_url_for('indeed') == 'https://in.indeed.com'
        with pytest.raises(ValueError):
            target_url_for('monster')
