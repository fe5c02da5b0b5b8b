"""Fetcher implementations for the two fetch strategies."""

from .static import HttpFetcher
from .browser import BrowserFetcher

__all__ = ['HttpFetcher', 'BrowserFetcher']
