"""Shared utilities for scrapers."""

from .normalizers import (
    clean_text,
    normalize_organization,
    normalize_location,
    absolute_url,
)
from .extractors import (
    parse_html,
    node_text,
    node_attr,
    first_match,
    all_matches,
)

__all__ = [
    'clean_text',
    'normalize_organization',
    'normalize_location',
    'absolute_url',
    'parse_html',
    'node_text',
    'node_attr',
    'first_match',
    'all_matches',
]
