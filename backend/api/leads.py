"""
Bulk import of scraped listings into the lead store.

The scraper engine never writes to the database; the API hands its
normalized listings to import_listings() together with an owner id.
"""

import json
import logging
from dataclasses import dataclass, asdict
from typing import Iterable, Optional

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.database import Lead
from scrapers.base import NormalizedListing

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    imported: int = 0
    duplicates: int = 0
    errors: int = 0

    def to_dict(self):
        return asdict(self)


def listing_to_lead(listing: NormalizedListing, owner_id: str, keyword: Optional[str] = None) -> Lead:
    """Map a normalized listing onto a new Lead row."""
    return Lead(
        owner_id=owner_id,
        name=listing.title or listing.organization,
        company=listing.organization,
        location=listing.location_text,
        salary=listing.compensation_text,
        experience=listing.experience_text,
        description=listing.description_snippet,
        source=listing.source_site,
        source_url=listing.detail_url,
        external_id=listing.external_id,
        status='new',
        tags=json.dumps(listing.skills) if listing.skills else None,
        extra=json.dumps({
            'keyword': keyword,
            'scraped_at': listing.extracted_at.isoformat(),
        }),
    )


def find_existing_lead(db: Session, listing: NormalizedListing, owner_id: str) -> Optional[Lead]:
    """Same owner and either the same site id or the same detail URL."""
    if listing.external_id:
        lead = db.query(Lead).filter(and_(
            Lead.owner_id == owner_id,
            Lead.source == listing.source_site,
            Lead.external_id == listing.external_id,
        )).first()
        if lead:
            return lead
    if listing.detail_url:
        return db.query(Lead).filter(and_(
            Lead.owner_id == owner_id,
            Lead.source_url == listing.detail_url,
        )).first()
    return None


def import_listings(
    db: Session,
    listings: Iterable[NormalizedListing],
    owner_id: str,
    keyword: Optional[str] = None
) -> ImportResult:
    """
    Insert listings as leads for an owner, skipping ones already stored.

    Args:
        db: Database session
        listings: Normalized listings from a scrape run
        owner_id: Lead owner
        keyword: Search keyword, stored with each lead

    Returns:
        ImportResult with imported, duplicate and error counts
    """
    result = ImportResult()

    for listing in listings:
        if find_existing_lead(db, listing, owner_id):
            result.duplicates += 1
            continue
        try:
            db.add(listing_to_lead(listing, owner_id, keyword))
            db.commit()
            result.imported += 1
        except SQLAlchemyError as e:
            db.rollback()
            result.errors += 1
            logger.error(f"Failed to import listing {listing.external_id or listing.detail_url}: {e}")

    logger.info(
        f"Imported {result.imported} leads for {owner_id} "
        f"({result.duplicates} duplicates, {result.errors} errors)"
    )
    return result
