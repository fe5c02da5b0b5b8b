"""
Site configurations for the supported job boards.

Each site has a SiteConfig that defines:
- Base URL and the domains that route to it
- Page ceiling and results per page
- Rate limiting, retry and browser wait settings
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse


@dataclass
class SiteConfig:
    """Configuration for a job board."""
    key: str                              # Registry key (e.g., 'indeed')
    name: str                             # Display name
    base_url: str                         # Default origin for search pages
    domains: Tuple[str, ...]              # Hostnames that map to this site
    max_pages: int = 20                   # Hard ceiling for max_pages
    results_per_page: int = 10
    page_delay_seconds: float = 2.0       # Sleep between result pages
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 2.0
    card_wait_timeout: float = 10.0       # Browser wait for a visible card
    settle_delay: float = 2.0             # Browser delay after DOM parse
    enabled: bool = True


SITES: Dict[str, SiteConfig] = {
    'indeed': SiteConfig(
        key='indeed',
        name='Indeed',
        base_url='https://in.indeed.com',
        domains=('indeed.com',),
        max_pages=20,
        results_per_page=10,
        card_wait_timeout=30.0,
    ),

    'naukri': SiteConfig(
        key='naukri',
        name='Naukri',
        base_url='https://www.naukri.com',
        domains=('naukri.com',),
        max_pages=20,
        results_per_page=20,
        card_wait_timeout=10.0,
    ),
}


def get_site_config(site_key: str) -> SiteConfig:
    """Get configuration for a specific site."""
    if site_key not in SITES:
        raise ValueError(f"Unknown site: {site_key}. Valid sites: {list(SITES.keys())}")
    return SITES[site_key]


def get_enabled_sites() -> Dict[str, SiteConfig]:
    """Get all enabled site configurations."""
    return {k: v for k, v in SITES.items() if v.enabled}


def extract_host(url: str) -> str:
    """
    Lower-cased hostname of a URL, tolerating a missing scheme.

    Examples:
        "https://in.indeed.com/jobs" -> "in.indeed.com"
        "naukri.com" -> "naukri.com"
    """
    if not url:
        return ''
    if '://' not in url:
        url = 'https://' + url
    host = urlparse(url).hostname or ''
    return host.lower()


def resolve_site_key(target_url: str) -> Optional[str]:
    """Map a requested URL to a site key by domain, or None."""
    host = extract_host(target_url)
    if not host:
        return None
    for key, config in SITES.items():
        for domain in config.domains:
            if host == domain or host.endswith('.' + domain):
                return key
    return None


def get_site_summary() -> List[Dict]:
    """Summary of all configured sites."""
    return [
        {
            'key': key,
            'name': config.name,
            'base_url': config.base_url,
            'max_pages': config.max_pages,
            'enabled': config.enabled,
        }
        for key, config in SITES.items()
    ]
