"""
Low-level helpers for pulling values out of parsed HTML nodes.

Selectors are always tried in order; the first non-empty value wins.
"""

import logging
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)


def parse_html(document: Optional[str]) -> Optional[BeautifulSoup]:
    """Parse a document, returning None when there is nothing to parse."""
    if not document or not document.strip():
        return None
    return BeautifulSoup(document, 'html.parser')


def node_text(node: Optional[Tag]) -> Optional[str]:
    if node is None:
        return None
    text = node.get_text(' ', strip=True)
    return text or None


def node_attr(node: Optional[Tag], attribute: str) -> Optional[str]:
    if node is None:
        return None
    value = node.get(attribute)
    if isinstance(value, list):
        value = ' '.join(value)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def safe_select(node: Tag, selector: str) -> List[Tag]:
    """select() that treats an unsupported selector as no match."""
    try:
        return node.select(selector)
    except (SelectorSyntaxError, ValueError, NotImplementedError) as e:
        logger.debug(f"Selector {selector!r} rejected: {e}")
        return []


def first_match(
    node: Tag,
    selectors: Sequence[str],
    attribute: Optional[str] = None
) -> Optional[str]:
    """
    Value of the first selector that resolves to something non-empty.

    Args:
        node: Card element to search within
        selectors: Ordered selector alternatives
        attribute: Read this attribute instead of the element text

    Returns:
        The extracted string or None
    """
    for selector in selectors:
        for match in safe_select(node, selector):
            value = node_attr(match, attribute) if attribute else node_text(match)
            if value:
                return value
    return None


def all_matches(node: Tag, selectors: Sequence[str]) -> List[str]:
    """Texts of every element under the first selector that yields any text."""
    for selector in selectors:
        values = [t for t in (node_text(m) for m in safe_select(node, selector)) if t]
        if values:
            return values
    return []
