"""
Exception types raised by the scraper system.

Extraction never raises: markup drift shows up as an empty fragment list.
"""

from enum import Enum
from typing import List, Optional


class ScraperError(Exception):
    """Base class for scraper errors."""


class ParameterValidationError(ScraperError):
    """Run parameters were rejected before any network activity."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid parameters: " + "; ".join(self.errors))


class FetchErrorKind(Enum):
    NOT_FOUND = "not_found"
    BLOCKED_OR_FORBIDDEN = "blocked_or_forbidden"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_ERROR = "upstream_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"


RETRYABLE_KINDS = frozenset({
    FetchErrorKind.RATE_LIMITED,
    FetchErrorKind.UPSTREAM_ERROR,
    FetchErrorKind.NETWORK_ERROR,
    FetchErrorKind.TIMEOUT,
})


class FetchError(ScraperError):
    """A single page could not be retrieved."""

    def __init__(
        self,
        kind: FetchErrorKind,
        url: str,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None
    ):
        self.kind = kind
        self.url = url
        self.cause = cause
        self.status_code = status_code
        detail = f"HTTP {status_code}" if status_code else (str(cause) if cause else kind.value)
        super().__init__(f"{kind.value} for {url}: {detail}")

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS


def classify_status(status_code: int) -> Optional[FetchErrorKind]:
    """Map an HTTP status to an error kind; None for 2xx."""
    if 200 <= status_code < 300:
        return None
    if status_code == 404:
        return FetchErrorKind.NOT_FOUND
    if status_code == 403:
        return FetchErrorKind.BLOCKED_OR_FORBIDDEN
    if status_code == 429:
        return FetchErrorKind.RATE_LIMITED
    if 500 <= status_code < 600:
        return FetchErrorKind.UPSTREAM_ERROR
    return FetchErrorKind.HTTP_STATUS


class ResourceInitializationError(ScraperError):
    """The headless browser could not be started."""


class UnsupportedSiteError(ScraperError):
    """No adapter exists for the requested target URL."""

    def __init__(self, target_url: str):
        self.target_url = target_url
        super().__init__(f"Unsupported site: {target_url}")


_COARSE_REASONS = {
    FetchErrorKind.NOT_FOUND: "Search page not found",
    FetchErrorKind.BLOCKED_OR_FORBIDDEN: "Access blocked by the job site",
    FetchErrorKind.RATE_LIMITED: "Rate limited by the job site",
    FetchErrorKind.UPSTREAM_ERROR: "Job site returned a server error",
    FetchErrorKind.NETWORK_ERROR: "Network error while contacting the job site",
    FetchErrorKind.TIMEOUT: "Timed out loading the job site",
    FetchErrorKind.HTTP_STATUS: "Unexpected response from the job site",
}


def coarse_reason(exc: BaseException) -> str:
    """Short, user-facing explanation for an error."""
    if isinstance(exc, FetchError):
        return _COARSE_REASONS.get(exc.kind, "Failed to fetch results")
    if isinstance(exc, ParameterValidationError):
        return str(exc)
    if isinstance(exc, ResourceInitializationError):
        return "Browser could not be started"
    if isinstance(exc, UnsupportedSiteError):
        return "Unsupported job site"
    return "Scrape failed"
