from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List, Optional
import asyncio
import logging
import re

from api.database import get_db, init_db, engine
from api.config import settings
from api.leads import import_listings
from scrapers.base import FetchStrategy, ScrapeRunResult
from scrapers.config import get_site_summary
from scrapers.errors import (
    ParameterValidationError,
    ResourceInitializationError,
    UnsupportedSiteError,
    coarse_reason,
)
from scrapers.manager import ScraperManager, ScrapeJob, target_url_for
from pydantic import BaseModel

# Setup logging directory
settings.log_dir.mkdir(exist_ok=True)


# Custom formatter to strip ANSI color codes from file logs
class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)


def _build_handlers():
    file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
    file_handler.setFormatter(ColorStripFormatter(settings.log_format))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(settings.log_format))
    return [file_handler, console_handler]


log_level = getattr(logging, settings.log_level.upper())

logging.basicConfig(
    level=log_level,
    handlers=_build_handlers(),
    force=True  # Override any existing configuration
)

# Adapter loggers live under 'scraper.' and get their own handlers so
# colorized run progress is written once
scraper_logger = logging.getLogger('scraper')
scraper_logger.propagate = False
if not scraper_logger.handlers:
    for handler in _build_handlers():
        scraper_logger.addHandler(handler)
scraper_logger.setLevel(log_level)

logger = logging.getLogger(__name__)


async def cleanup_resources():
    """Clean up all resources on shutdown."""
    logger.info("Closing database connections...")
    try:
        await asyncio.wait_for(
            asyncio.get_running_loop().run_in_executor(None, lambda: engine.dispose(close=True)),
            timeout=2.0
        )
        logger.info("Database connections closed")
    except asyncio.TimeoutError:
        logger.warning("Database cleanup timed out")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info("Radius Backend Starting Up")
    logger.info("=" * 60)
    logger.info(f"Log file: {settings.log_file}")
    logger.info(f"Database: {settings.database_url}")
    init_db()
    logger.info("Database initialized successfully")

    yield  # Application runs here

    logger.info("Radius Backend Shutting Down")
    await cleanup_resources()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Radius API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty response for favicon requests"""
    return Response(status_code=204)


def require_token(authorization: Optional[str] = Header(None)):
    """Bearer-token gate; open when no token is configured."""
    if not settings.api_token:
        return
    if authorization != f"Bearer {settings.api_token}":
        raise HTTPException(status_code=401, detail="Invalid or missing API token")


# Pydantic models for API requests
class ScrapeRequest(BaseModel):
    keyword: str
    location: str
    max_pages: Optional[int] = None
    fetch_strategy: FetchStrategy = FetchStrategy.HTTP
    headless: Optional[bool] = None
    continue_on_error: Optional[bool] = None
    owner_id: Optional[str] = None


class BatchJobRequest(ScrapeRequest):
    site: str


class BatchRequest(BaseModel):
    jobs: List[BatchJobRequest]
    stop_on_error: bool = False
    owner_id: Optional[str] = None


def capped_pages(requested: Optional[int]) -> int:
    """Interactive requests never exceed the configured page cap."""
    if requested is None:
        return settings.api_max_pages
    return min(requested, settings.api_max_pages)


def build_job(site: str, request: ScrapeRequest, name: Optional[str] = None) -> ScrapeJob:
    try:
        target_url = target_url_for(site.lower())
    except (ValueError, KeyError):
        raise HTTPException(status_code=404, detail=f"Unknown site: {site}")
    return ScrapeJob(
        name=name or f"{site.lower()}-{request.fetch_strategy.value}",
        target_url=target_url,
        keyword=request.keyword,
        location=request.location,
        max_pages=capped_pages(request.max_pages),
        fetch_strategy=request.fetch_strategy,
        continue_on_error=request.continue_on_error,
    )


def result_payload(result: ScrapeRunResult, imported: Optional[dict]) -> dict:
    """Run outcome for API callers: coarse message and counts only."""
    return {
        "job_name": result.job_name,
        "site": result.site,
        "strategy": result.strategy.value,
        "status": result.status.value,
        "message": result.message,
        "statistics": result.statistics.to_dict(),
        "error_count": len(result.errors),
        "listings": [listing.to_dict() for listing in result.listings],
        "import": imported,
    }


# API Endpoints

@app.get("/")
async def root():
    return {"message": "Radius API", "version": "1.0.0"}


@app.get("/api/scrapers")
async def list_scrapers():
    """List supported job sites and fetch strategies"""
    manager = ScraperManager()
    return {
        "sites": get_site_summary(),
        "scrapers": manager.list_scrapers(),
        "max_pages": settings.api_max_pages,
    }


@app.post("/api/scrape/{site}", dependencies=[Depends(require_token)])
async def scrape_site(site: str, request: ScrapeRequest, db: Session = Depends(get_db)):
    """Run a scrape for one job site and import the results as leads"""
    job = build_job(site, request)
    manager = ScraperManager(adapter_options=settings.adapter_options(request.headless))

    try:
        result = await manager.run_job(job)
    except ParameterValidationError as e:
        raise HTTPException(status_code=400, detail={"message": "Invalid parameters", "errors": e.errors})
    except UnsupportedSiteError as e:
        raise HTTPException(status_code=404, detail=coarse_reason(e))
    except ResourceInitializationError as e:
        logger.error(f"Scrape {job.name} could not start: {e}")
        raise HTTPException(status_code=503, detail=coarse_reason(e))

    imported = None
    if result.listings:
        owner_id = request.owner_id or settings.default_owner_id
        imported = import_listings(db, result.listings, owner_id, keyword=job.keyword).to_dict()

    return result_payload(result, imported)


@app.post("/api/scrape-batch", dependencies=[Depends(require_token)])
async def scrape_batch(request: BatchRequest, db: Session = Depends(get_db)):
    """Run several scrapes one after another and import all results"""
    jobs = [build_job(item.site, item, name=f"{i + 1}-{item.site.lower()}") for i, item in enumerate(request.jobs)]
    manager = ScraperManager(adapter_options=settings.adapter_options())

    results = await manager.run_batch(
        jobs,
        stop_on_error=request.stop_on_error,
        inter_job_delay=settings.batch_inter_job_delay,
    )

    payloads = []
    for item, result in zip(request.jobs, results):
        imported = None
        if result.listings:
            owner_id = item.owner_id or request.owner_id or settings.default_owner_id
            imported = import_listings(db, result.listings, owner_id, keyword=item.keyword).to_dict()
        payloads.append(result_payload(result, imported))

    summary = manager.get_results_summary()
    summary.pop("jobs", None)
    return {"results": payloads, "summary": summary}
