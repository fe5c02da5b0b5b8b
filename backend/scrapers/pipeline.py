"""
Normalization pipeline for the fragments collected by one run.

Stages run in a fixed order over the whole result set:
clean, deduplicate, validate, then report counts.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Iterable, List, Optional, Tuple, Union

from .base import DedupeKey, ListingFragment, NormalizedListing
from .utils.normalizers import (
    absolute_url,
    clean_text,
    normalize_location,
    normalize_organization,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://www.indeed.com'

Record = Union[ListingFragment, NormalizedListing]


@dataclass
class PipelineStats:
    original: int = 0
    duplicates_removed: int = 0
    invalid_removed: int = 0
    final: int = 0

    def to_dict(self):
        return asdict(self)


@dataclass
class PipelineResult:
    listings: List[NormalizedListing] = field(default_factory=list)
    stats: PipelineStats = field(default_factory=PipelineStats)


def clean_fragment(fragment: Record, base_url: Optional[str] = DEFAULT_BASE_URL) -> NormalizedListing:
    """Apply every field-level cleaning rule to one fragment."""
    skills = [s for s in (clean_text(skill) for skill in (fragment.skills or [])) if s]
    return NormalizedListing(
        source_site=fragment.source_site,
        external_id=clean_text(fragment.external_id),
        title=clean_text(fragment.title),
        organization=normalize_organization(fragment.organization),
        location_text=normalize_location(fragment.location_text),
        compensation_text=clean_text(fragment.compensation_text),
        description_snippet=clean_text(fragment.description_snippet),
        detail_url=absolute_url(fragment.detail_url, base_url),
        experience_text=clean_text(fragment.experience_text),
        skills=skills,
        page=fragment.page,
        extracted_at=fragment.extracted_at,
    )


def clean_fragments(
    fragments: Iterable[Record],
    base_url: Optional[str] = DEFAULT_BASE_URL
) -> List[NormalizedListing]:
    return [clean_fragment(f, base_url) for f in fragments]


def dedupe_key(listing: NormalizedListing, dedupe_by: DedupeKey) -> Optional[str]:
    """
    Identity of a listing for deduplication, or None when it has none.

    Listings without a key are never treated as duplicates of each other.
    """
    if dedupe_by == DedupeKey.EXTERNAL_ID:
        return listing.external_id
    if dedupe_by == DedupeKey.DETAIL_URL:
        return listing.detail_url
    if listing.external_id is None and listing.detail_url is None:
        return None
    return f"{listing.external_id or ''}|{listing.detail_url or ''}"


def remove_duplicates(
    listings: List[NormalizedListing],
    dedupe_by: DedupeKey = DedupeKey.EXTERNAL_ID
) -> Tuple[List[NormalizedListing], int]:
    """Keep the first occurrence of each key; survivors keep their order."""
    seen = set()
    kept = []
    removed = 0
    for listing in listings:
        key = dedupe_key(listing, dedupe_by)
        if key is None:
            kept.append(listing)
            continue
        if key in seen:
            removed += 1
            continue
        seen.add(key)
        kept.append(listing)
    return kept, removed


def is_valid_listing(listing: Record) -> bool:
    """Needs a title or organization, and an external id or detail URL."""
    has_identity = bool(listing.title or listing.organization)
    has_reference = bool(listing.external_id or listing.detail_url)
    return has_identity and has_reference


def filter_valid(listings: List[NormalizedListing]) -> Tuple[List[NormalizedListing], int]:
    kept = [listing for listing in listings if is_valid_listing(listing)]
    return kept, len(listings) - len(kept)


def process_fragments(
    fragments: Iterable[Record],
    base_url: Optional[str] = DEFAULT_BASE_URL,
    dedupe_by: DedupeKey = DedupeKey.EXTERNAL_ID,
    remove_invalid: bool = True
) -> PipelineResult:
    """
    Run the full pipeline.

    Args:
        fragments: Raw fragments in page-then-card order
        base_url: Origin used to absolutize detail URLs
        dedupe_by: Identity used for deduplication
        remove_invalid: Drop listings without identity or reference

    Returns:
        PipelineResult with surviving listings and counts
    """
    fragments = list(fragments)
    stats = PipelineStats(original=len(fragments))

    listings = clean_fragments(fragments, base_url)
    listings, stats.duplicates_removed = remove_duplicates(listings, dedupe_by)
    if remove_invalid:
        listings, stats.invalid_removed = filter_valid(listings)
    stats.final = len(listings)

    logger.debug(
        f"Pipeline: {stats.original} in, {stats.duplicates_removed} duplicates, "
        f"{stats.invalid_removed} invalid, {stats.final} out"
    )
    return PipelineResult(listings=listings, stats=stats)


SORT_FIELDS = ('extracted_at', 'title', 'organization', 'location_text')


def sort_listings(
    listings: List[NormalizedListing],
    by: str = 'extracted_at',
    descending: bool = True
) -> List[NormalizedListing]:
    """Stable sort on one field; listings missing the field go last."""
    if by not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {by}. Valid fields: {list(SORT_FIELDS)}")

    present = [listing for listing in listings if getattr(listing, by) is not None]
    missing = [listing for listing in listings if getattr(listing, by) is None]
    if by == 'extracted_at':
        present.sort(key=lambda listing: listing.extracted_at, reverse=descending)
    else:
        present.sort(key=lambda listing: getattr(listing, by).lower(), reverse=descending)
    return present + missing
