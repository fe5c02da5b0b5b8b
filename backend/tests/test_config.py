"""
Tests for application and site configuration.
"""

import pytest


class TestSettings:
    """Test the Settings configuration class."""

    def test_settings_defaults(self):
        """Test that settings have sensible defaults."""
        from api.config import settings

        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 8000
        assert settings.api_debug is False
        assert settings.api_max_pages == 5
        assert settings.scraper_timeout == 30
        assert settings.scraper_max_retries == 3
        assert settings.log_level == "INFO"

    def test_settings_database_url(self):
        """Test that database URL is set."""
        from api.config import settings

        assert settings.database_url is not None
        assert "leads.db" in settings.database_url

    def test_settings_cors_origins(self):
        """Test that CORS origins are configured."""
        from api.config import settings

        assert isinstance(settings.cors_origins, list)
        assert len(settings.cors_origins) > 0

    def test_settings_log_paths(self):
        """Test that log paths are valid."""
        from api.config import settings

        assert settings.log_file.name == "backend.log"
        assert settings.log_file.parent == settings.log_dir

    def test_settings_data_dir(self):
        from api.config import settings
        assert "data" in str(settings.data_dir)

    def test_environment_override(self, monkeypatch):
        """Settings are read from environment variables."""
        from api.config import Settings

        monkeypatch.setenv("API_MAX_PAGES", "2")
        monkeypatch.setenv("API_TOKEN", "s3cret")

        settings = Settings()

        assert settings.api_max_pages == 2
        assert settings.api_token == "s3cret"

    def test_adapter_options(self):
        from api.config import Settings

        settings = Settings(browser_headless=True, scraper_page_delay=1.5)

        assert settings.adapter_options()["headless"] is True
        assert settings.adapter_options(headless=False)["headless"] is False
        assert settings.adapter_options()["page_delay"] == 1.5


class TestSiteConfig:
    """Test per-site configuration."""

    def test_sites(self):
        from scrapers.config import SITES

        assert set(SITES) == {"indeed", "naukri"}
        assert SITES["naukri"].results_per_page == 20
        assert SITES["indeed"].card_wait_timeout > SITES["naukri"].card_wait_timeout

    def test_unknown_site(self):
        from scrapers.config import get_site_config

        with pytest.raises(ValueError):
            get_site_config("monster")

    @pytest.mark.parametrize("url,key", [
        ("https://in.indeed.com/jobs?q=python", "indeed"),
        ("https://www.indeed.com", "indeed"),
        ("naukri.com", "naukri"),
        ("https://WWW.NAUKRI.COM/python-jobs", "naukri"),
        ("https://www.linkedin.com", None),
        ("", None),
    ])
    def test_resolve_site_key(self, url, key):
        from scrapers.config import resolve_site_key

        assert resolve_site_key(url) == key
