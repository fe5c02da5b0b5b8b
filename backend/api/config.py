"""
Application Configuration
Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    database_url: str = "sqlite:///./data/leads.db"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_token: Optional[str] = None  # Bearer token; unset means open access
    api_max_pages: int = 5           # Page cap for interactive scrape requests
    default_owner_id: str = "default"

    # CORS Configuration
    cors_origins: List[str] = ["*"]

    # Scraper Configuration
    scraper_timeout: float = 30.0
    scraper_max_retries: int = 3
    scraper_retry_delay: float = 2.0
    scraper_page_delay: float = 2.0

    # Browser Configuration
    browser_headless: bool = True
    browser_navigation_timeout: float = 30.0
    browser_settle_delay: float = 2.0

    # Batch Configuration
    batch_inter_job_delay: float = 5.0

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Paths
    @property
    def log_dir(self) -> Path:
        """Get the log directory path."""
        return Path(__file__).parent.parent.parent / "logs"

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.log_dir / "backend.log"

    @property
    def data_dir(self) -> Path:
        """Get the data directory path."""
        return Path(__file__).parent.parent / "data"

    def adapter_options(self, headless: Optional[bool] = None) -> dict:
        """Keyword options handed to every scraper adapter factory."""
        return {
            'timeout': self.scraper_timeout,
            'max_retries': self.scraper_max_retries,
            'retry_delay': self.scraper_retry_delay,
            'page_delay': self.scraper_page_delay,
            'headless': self.browser_headless if headless is None else headless,
            'navigation_timeout': self.browser_navigation_timeout,
            'settle_delay': self.browser_settle_delay,
        }

    class Config:
        # Only load .env if it exists to avoid permission errors
        env_file = ".env" if Path(".env").exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


# Global settings instance
settings = Settings()
