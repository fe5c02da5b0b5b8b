"""
Structured extractor: turns a result page into listing fragments.

A ListingSchema describes one site's markup as ordered selector
alternatives. Job boards A/B-test their result cards, so every card
selector and every field carries several fallbacks and the first one
that yields something wins.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from bs4 import Tag

from .base import ListingFragment, utc_now
from .utils.extractors import parse_html, safe_select, first_match, all_matches, node_attr

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldRule:
    """Ordered selector alternatives for one field of a card."""
    selectors: Tuple[str, ...]
    attribute: Optional[str] = None
    multiple: bool = False


@dataclass(frozen=True)
class ListingSchema:
    """Markup description of one job board's result page."""
    site: str
    card_selectors: Tuple[str, ...]
    fields: Dict[str, FieldRule]
    id_attributes: Tuple[str, ...] = ()
    id_selectors: Tuple[str, ...] = ()
    detail_url_template: Optional[str] = None  # e.g. '/viewjob?jk={id}'
    wait_selectors: Tuple[str, ...] = field(default=())
    id_from_url: Optional[Callable[[str], Optional[str]]] = None

    @property
    def wait_selector(self) -> str:
        """Comma-joined selector a browser waits on before reading the page."""
        return ', '.join(self.wait_selectors or self.card_selectors)


def find_cards(soup: Tag, card_selectors: Sequence[str]) -> Tuple[Optional[str], List[Tag]]:
    """Cards matched by the first selector with at least one hit."""
    for selector in card_selectors:
        cards = safe_select(soup, selector)
        if cards:
            return selector, cards
    return None, []


def extract_card_id(card: Tag, schema: ListingSchema) -> Optional[str]:
    for attribute in schema.id_attributes:
        value = node_attr(card, attribute)
        if value:
            return value
    for selector in schema.id_selectors:
        for match in safe_select(card, selector):
            for attribute in schema.id_attributes:
                value = node_attr(match, attribute)
                if value:
                    return value
    return None


def _field(card: Tag, schema: ListingSchema, name: str):
    rule = schema.fields.get(name)
    if rule is None:
        return [] if name == 'skills' else None
    if rule.multiple:
        return all_matches(card, rule.selectors)
    return first_match(card, rule.selectors, rule.attribute)


def extract_card(card: Tag, schema: ListingSchema, page: Optional[int] = None) -> Optional[ListingFragment]:
    """Build a fragment from one card, or None when it has no title and no organization."""
    title = _field(card, schema, 'title')
    organization = _field(card, schema, 'organization')
    if not title and not organization:
        return None

    external_id = extract_card_id(card, schema)
    detail_url = _field(card, schema, 'detail_url')
    if not external_id and detail_url and schema.id_from_url:
        external_id = schema.id_from_url(detail_url)
    if not detail_url and external_id and schema.detail_url_template:
        detail_url = schema.detail_url_template.format(id=external_id)

    return ListingFragment(
        source_site=schema.site,
        external_id=external_id,
        title=title,
        organization=organization,
        location_text=_field(card, schema, 'location'),
        compensation_text=_field(card, schema, 'compensation'),
        description_snippet=_field(card, schema, 'snippet'),
        detail_url=detail_url,
        experience_text=_field(card, schema, 'experience'),
        skills=_field(card, schema, 'skills'),
        page=page,
        extracted_at=utc_now(),
    )


def extract_listings(
    document: Optional[str],
    schema: ListingSchema,
    page: Optional[int] = None
) -> List[ListingFragment]:
    """
    Extract every listing fragment from a result page.

    Never raises on bad markup: an empty, unparseable or unrecognized
    document simply yields an empty list.

    Args:
        document: Raw HTML of a result page
        schema: Site markup description
        page: 1-based page number, recorded on each fragment

    Returns:
        Fragments in card order
    """
    soup = parse_html(document)
    if soup is None:
        logger.debug(f"[{schema.site}] Empty document on page {page}")
        return []

    selector, cards = find_cards(soup, schema.card_selectors)
    if not cards:
        logger.warning(f"[{schema.site}] No job cards found on page {page}")
        return []

    logger.debug(f"[{schema.site}] Found {len(cards)} cards with selector: {selector}")

    fragments = []
    for card in cards:
        fragment = extract_card(card, schema, page)
        if fragment is not None:
            fragments.append(fragment)

    skipped = len(cards) - len(fragments)
    if skipped:
        logger.debug(f"[{schema.site}] Skipped {skipped} empty cards on page {page}")
    return fragments
