"""
Data structures shared by the job-listing scraper system.

Fragments are produced by the extractor, turned into normalized listings
by the pipeline and returned to callers inside a ScrapeRunResult.
"""

from typing import List, Dict, Optional, Any, Callable
from dataclasses import dataclass, field, asdict
from enum import Enum
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    GRAY = '\033[90m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def cyan(text):
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def gray(text):
        return f"{Colors.GRAY}{text}{Colors.RESET}"

    @staticmethod
    def bold(text):
        return f"{Colors.BOLD}{text}{Colors.RESET}"


class FetchStrategy(Enum):
    """How result pages are retrieved."""
    HTTP = "http"         # httpx, plain request
    BROWSER = "browser"   # Playwright, headless Chromium


class RunStatus(Enum):
    """Lifecycle of a single scrape run."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class DedupeKey(Enum):
    """Identity used when removing duplicate listings."""
    EXTERNAL_ID = "external_id"
    DETAIL_URL = "detail_url"
    BOTH = "both"


@dataclass
class ListingFragment:
    """Raw listing candidate pulled out of a single result card."""
    source_site: str
    external_id: Optional[str] = None
    title: Optional[str] = None
    organization: Optional[str] = None
    location_text: Optional[str] = None
    compensation_text: Optional[str] = None
    description_snippet: Optional[str] = None
    detail_url: Optional[str] = None
    experience_text: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    page: Optional[int] = None
    extracted_at: datetime = field(default_factory=utc_now)


@dataclass
class NormalizedListing:
    """A cleaned fragment; the unit handed back to callers."""
    source_site: str
    external_id: Optional[str] = None
    title: Optional[str] = None
    organization: Optional[str] = None
    location_text: Optional[str] = None
    compensation_text: Optional[str] = None
    description_snippet: Optional[str] = None
    detail_url: Optional[str] = None
    experience_text: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    page: Optional[int] = None
    extracted_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['extracted_at'] = self.extracted_at.isoformat()
        return data


@dataclass(frozen=True)
class ProgressEvent:
    """Emitted to the caller's observer after every page attempt."""
    current_page: int
    total_pages: int
    cumulative_listings_found: int

    @property
    def percentage(self) -> int:
        if self.total_pages <= 0:
            return 0
        return (self.current_page * 100) // self.total_pages


ProgressCallback = Callable[[ProgressEvent], Any]


@dataclass(frozen=True)
class ScrapeRunConfig:
    """Input contract for one run. Never mutated once the run starts."""
    search_keyword: str
    search_location: str
    max_pages: int = 5
    fetch_strategy: FetchStrategy = FetchStrategy.HTTP
    on_progress: Optional[ProgressCallback] = None
    dedupe_by: DedupeKey = DedupeKey.EXTERNAL_ID

    def as_params(self) -> Dict[str, Any]:
        return {
            'keyword': self.search_keyword,
            'location': self.search_location,
            'max_pages': self.max_pages,
        }


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class ErrorRecord:
    """One per-page failure. Carries no stack trace."""
    message: str
    kind: str
    page: Optional[int] = None
    url: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'message': self.message,
            'kind': self.kind,
            'page': self.page,
            'url': self.url,
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass
class AdapterStats:
    """Resettable counters owned by a single adapter instance."""
    requests_attempted: int = 0
    requests_succeeded: int = 0
    requests_failed: int = 0
    fragments_extracted: int = 0
    errors: List[ErrorRecord] = field(default_factory=list)

    def reset(self):
        self.requests_attempted = 0
        self.requests_succeeded = 0
        self.requests_failed = 0
        self.fragments_extracted = 0
        self.errors = []

    def snapshot(self) -> 'AdapterStats':
        return AdapterStats(
            requests_attempted=self.requests_attempted,
            requests_succeeded=self.requests_succeeded,
            requests_failed=self.requests_failed,
            fragments_extracted=self.fragments_extracted,
            errors=list(self.errors),
        )


@dataclass
class RunStatistics:
    """Counters reported alongside the listings of a run."""
    requests_attempted: int = 0
    requests_succeeded: int = 0
    requests_failed: int = 0
    pages_scraped: int = 0
    fragments_extracted: int = 0
    duplicates_removed: int = 0
    invalid_removed: int = 0
    final_count: int = 0
    stopped_early: bool = False
    duration_seconds: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScrapeRunResult:
    """Result of a scrape run."""
    job_name: str
    site: str
    strategy: FetchStrategy
    started_at: datetime
    status: RunStatus = RunStatus.PENDING
    completed_at: Optional[datetime] = None
    listings: List[NormalizedListing] = field(default_factory=list)
    statistics: RunStatistics = field(default_factory=RunStatistics)
    errors: List[ErrorRecord] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == RunStatus.COMPLETED

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self, include_listings: bool = True) -> Dict[str, Any]:
        data = {
            'job_name': self.job_name,
            'site': self.site,
            'strategy': self.strategy.value,
            'status': self.status.value,
            'message': self.message,
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'duration_seconds': self.duration_seconds,
            'statistics': self.statistics.to_dict(),
            'errors': [e.to_dict() for e in self.errors[:10]],  # Limit error details
            'success': self.success,
        }
        if include_listings:
            data['listings'] = [listing.to_dict() for listing in self.listings]
        return data
