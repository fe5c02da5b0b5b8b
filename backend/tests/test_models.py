"""
Tests for the Lead model and listing import.
"""

import json

from api.database import Lead
from api.leads import import_listings, listing_to_lead
from scrapers.base import NormalizedListing


def make_listing(external_id="n-1", **kwargs):
    values = dict(
        source_site="naukri",
        external_id=external_id,
        title="Python Developer",
        organization="Infosys",
        location_text="Pune",
        compensation_text="6-10 Lacs PA",
        experience_text="2-5 Yrs",
        detail_url=f"https://www.naukri.com/job-listings-{external_id}",
        skills=["Python", "Django"],
    )
    values.update(kwargs)
    return NormalizedListing(**values)


class TestLeadModel:
    """Test the Lead model."""

    def test_create_lead(self, db_session):
        """Test creating a lead with defaults."""
        lead = Lead(owner_id="alice", name="Data Engineer", source="indeed")
        db_session.add(lead)
        db_session.commit()

        assert lead.id is not None
        assert lead.status == "new"
        assert lead.created_at is not None
        assert lead.updated_at is not None

    def test_listing_to_lead(self):
        listing = make_listing()
        lead = listing_to_lead(listing, "alice", keyword="python")

        assert lead.name == "Python Developer"
        assert lead.company == "Infosys"
        assert lead.salary == "6-10 Lacs PA"
        assert lead.experience == "2-5 Yrs"
        assert lead.source == "naukri"
        assert lead.source_url == "https://www.naukri.com/job-listings-n-1"
        assert json.loads(lead.tags) == ["Python", "Django"]
        extra = json.loads(lead.extra)
        assert extra["keyword"] == "python"
        assert extra["scraped_at"] == listing.extracted_at.isoformat()

    def test_listing_without_title_uses_company(self):
        lead = listing_to_lead(make_listing(title=None, skills=[]), "alice")
        assert lead.name == "Infosys"
        assert lead.tags is None


class TestImportListings:
    """Test bulk import and duplicate detection."""

    def test_imports_new_listings(self, db_session):
        result = import_listings(db_session, [make_listing("1"), make_listing("2")], "alice")

        assert result.imported == 2
        assert result.duplicates == 0
        assert db_session.query(Lead).count() == 2

    def test_duplicate_by_external_id(self, db_session):
        import_listings(db_session, [make_listing("1")], "alice")

        result = import_listings(db_session, [make_listing("1", detail_url="https://www.naukri.com/other")], "alice")

        assert result.duplicates == 1
        assert db_session.query(Lead).count() == 1

    def test_duplicate_by_detail_url(self, db_session):
        import_listings(db_session, [make_listing(None, detail_url="https://in.indeed.com/viewjob?jk=1")], "alice")

        result = import_listings(
            db_session, [make_listing(None, detail_url="https://in.indeed.com/viewjob?jk=1")], "alice"
        )

        assert result.duplicates == 1

    def test_same_id_on_other_site_is_new(self, db_session):
        import_listings(db_session, [make_listing("1")], "alice")

        result = import_listings(
            db_session, [make_listing("1", source_site="indeed", detail_url="https://in.indeed.com/viewjob?jk=1")],
            "alice"
        )

        assert result.imported == 1

    def test_owners_are_independent(self, db_session):
        import_listings(db_session, [make_listing("1")], "alice")

        result = import_listings(db_session, [make_listing("1")], "bob")

        assert result.imported == 1
        assert db_session.query(Lead).filter(Lead.owner_id == "bob").count() == 1

    def test_bad_row_does_not_lose_earlier_rows(self, db_session):
        """A row that violates a constraint is counted and skipped."""
        listings = [
            make_listing("1"),
            make_listing("2", title=None, organization=None),
            make_listing("3"),
        ]

        result = import_listings(db_session, listings, "alice")

        assert result.to_dict() == {"imported": 2, "duplicates": 0, "errors": 1}
        assert sorted(l.external_id for l in db_session.query(Lead).all()) == ["1", "3"]
