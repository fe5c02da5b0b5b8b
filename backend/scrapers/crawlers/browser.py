"""
Browser-mode fetcher for job boards that render results client-side.

Owns one headless Chromium process per session and opens a fresh page
for every fetch. The process is started by open() and must be released
by close(); acquire/release counters make leaks observable.
"""

import asyncio
from typing import Callable, Dict, Optional
import logging

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from ..errors import FetchError, FetchErrorKind, ResourceInitializationError, classify_status
from .static import DEFAULT_HEADERS

logger = logging.getLogger(__name__)

CLEANUP_TIMEOUT = 2.0  # seconds per cleanup operation

LAUNCH_ARGS = [
    '--disable-blink-features=AutomationControlled',
    '--disable-dev-shm-usage',
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-gpu',
]


class BrowserFetcher:
    """
    Fetches rendered HTML through a headless Chromium browser.

    Navigation waits only for DOMContentLoaded, then a fixed settle delay,
    then a bounded wait for a visible listing card. A card wait timeout is
    not an error: whatever the page holds at that point is returned.
    """

    def __init__(
        self,
        headless: bool = True,
        navigation_timeout: float = 30.0,
        settle_delay: float = 2.0,
        wait_selector: Optional[str] = None,
        wait_timeout: float = 10.0,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: Optional[str] = None,
        playwright_factory: Optional[Callable] = None
    ):
        """
        Initialize the browser fetcher.

        Args:
            headless: Run browser in headless mode
            navigation_timeout: Navigation timeout in seconds
            settle_delay: Seconds to wait after DOMContentLoaded
            wait_selector: CSS selector for listing cards
            wait_timeout: Max seconds to wait for a visible card
            viewport: Browser viewport size
            user_agent: User agent override
            playwright_factory: Callable returning a Playwright context manager
        """
        self.headless = headless
        self.navigation_timeout = navigation_timeout
        self.settle_delay = settle_delay
        self.wait_selector = wait_selector
        self.wait_timeout = wait_timeout
        self.viewport = viewport or {'width': 1280, 'height': 720}
        self.user_agent = user_agent or DEFAULT_HEADERS['User-Agent']
        self._playwright_factory = playwright_factory or async_playwright
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._acquired = False
        self.acquire_count = 0
        self.release_count = 0

    @property
    def is_open(self) -> bool:
        return self._context is not None

    async def open(self):
        """
        Start Playwright, launch Chromium and create a browser context.

        Raises:
            ResourceInitializationError: If any step fails. Partially
                started resources are released first.
        """
        if self._acquired:
            return self

        self._acquired = True
        self.acquire_count += 1
        try:
            self._playwright = await self._playwright_factory().start()
            logger.debug("Launching Chromium browser...")
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
            )
            extra_headers = {k: v for k, v in DEFAULT_HEADERS.items() if k != 'User-Agent'}
            self._context = await self._browser.new_context(
                viewport=self.viewport,
                user_agent=self.user_agent,
                locale='en-US',
                extra_http_headers=extra_headers,
            )
        except Exception as e:
            logger.error(f"Failed to initialize browser: {e}")
            await self.close()
            raise ResourceInitializationError(f"Browser failed to start: {e}") from e

        logger.debug("Browser initialization successful")
        return self

    async def _close_quietly(self, label: str, closer):
        try:
            await asyncio.wait_for(closer(), timeout=CLEANUP_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning(f"{label} close timed out, forcing cleanup")
        except Exception as e:
            logger.warning(f"Error closing {label.lower()}: {e}")

    async def close(self):
        """Release context, browser and Playwright. Safe to call repeatedly."""
        if not self._acquired:
            return

        if self._context is not None:
            await self._close_quietly("Context", self._context.close)
            self._context = None
        if self._browser is not None:
            await self._close_quietly("Browser", self._browser.close)
            self._browser = None
        if self._playwright is not None:
            await self._close_quietly("Playwright", self._playwright.stop)
            self._playwright = None

        self._acquired = False
        self.release_count += 1

    async def fetch(self, url: str) -> str:
        """
        Navigate to a URL and return the rendered HTML.

        Raises:
            FetchError: On navigation failure or an error status
            RuntimeError: If called before open()
        """
        if self._context is None:
            raise RuntimeError("BrowserFetcher.fetch() called before open()")

        logger.debug(f"BrowserFetcher fetching: {url}")
        try:
            page = await self._context.new_page()
        except PlaywrightError as e:
            raise FetchError(FetchErrorKind.NETWORK_ERROR, url, cause=e)

        try:
            try:
                response = await page.goto(
                    url,
                    wait_until='domcontentloaded',
                    timeout=int(self.navigation_timeout * 1000)
                )
            except PlaywrightTimeoutError as e:
                raise FetchError(FetchErrorKind.TIMEOUT, url, cause=e)
            except PlaywrightError as e:
                raise FetchError(FetchErrorKind.NETWORK_ERROR, url, cause=e)

            if response is not None:
                kind = classify_status(response.status)
                if kind is not None:
                    raise FetchError(kind, url, status_code=response.status)

            # Let client-side rendering finish
            await asyncio.sleep(self.settle_delay)

            if self.wait_selector:
                try:
                    await page.wait_for_selector(
                        self.wait_selector,
                        state='visible',
                        timeout=int(self.wait_timeout * 1000)
                    )
                except PlaywrightTimeoutError:
                    logger.warning(f"No listing cards visible after {self.wait_timeout}s: {url}")
                except PlaywrightError as e:
                    # e.g. the page re-navigated and destroyed the execution context
                    logger.warning(f"Card wait interrupted on {url}: {e}")

            try:
                return await page.content()
            except PlaywrightError as e:
                raise FetchError(FetchErrorKind.NETWORK_ERROR, url, cause=e)
        finally:
            await self._close_quietly("Page", page.close)

    async def __aenter__(self):
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
