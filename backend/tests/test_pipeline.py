"""
Tests for field normalizers and the normalization pipeline.
"""

import pytest

from scrapers.base import DedupeKey
from scrapers.pipeline import (
    clean_fragment,
    filter_valid,
    is_valid_listing,
    process_fragments,
    remove_duplicates,
    sort_listings,
)
from scrapers.utils.normalizers import (
    absolute_url,
    clean_text,
    normalize_location,
    normalize_organization,
)
from fakes import make_fragment


class TestNormalizers:
    """Test the individual cleaning rules."""

    def test_clean_text_collapses_whitespace(self):
        assert clean_text("  Senior\n   Python\tEngineer  ") == "Senior Python Engineer"

    def test_clean_text_blank_is_none(self):
        assert clean_text("   \n ") is None
        assert clean_text(None) is None

    def test_organization_drops_parentheticals(self):
        assert normalize_organization("Acme Corp (4.1 reviews)") == "Acme Corp"
        assert normalize_organization("Globex  (1,204)  Ltd") == "Globex Ltd"
        assert normalize_organization("(123)") is None

    def test_location_drops_leading_in(self):
        assert normalize_location("in Bengaluru, Karnataka") == "Bengaluru, Karnataka"
        assert normalize_location("In  in Pune") == "Pune"
        assert normalize_location("India") == "India"

    def test_location_replaces_bullets(self):
        assert normalize_location("Pune â€¢ Remote") == "Pune, Remote"
        assert normalize_location("Pune • Hybrid") == "Pune, Hybrid"

    def test_location_leading_in_after_bullet(self):
        assert normalize_location("• in Pune") == "Pune"
        assert normalize_location(normalize_location("• in Pune")) == "Pune"

    def test_absolute_url_resolves_relative(self):
        assert absolute_url("/viewjob?jk=abc", "https://in.indeed.com") == "https://in.indeed.com/viewjob?jk=abc"

    def test_absolute_url_keeps_absolute(self):
        url = "https://www.naukri.com/job-listings-123"
        assert absolute_url(url, "https://in.indeed.com") == url

    def test_absolute_url_rejects_malformed(self):
        assert absolute_url("javascript:void(0)", "https://in.indeed.com") is None
        assert absolute_url("http://[::1", "https://in.indeed.com") is None
        assert absolute_url("/viewjob", None) is None
        assert absolute_url("", "https://in.indeed.com") is None

    def test_absolute_url_always_well_formed(self):
        for path in ("/a", "b/c", "?q=1", "//cdn.example.com/x", "../up"):
            url = absolute_url(path, "https://www.indeed.com/jobs/")
            assert url.startswith("https://")


class TestCleanStage:
    """Test cleaning a whole fragment."""

    def test_clean_fragment(self):
        fragment = make_fragment(
            external_id=" 42 ",
            title=" Data\nEngineer ",
            organization="Initech (3.9)",
            location_text="in Mumbai",
            detail_url="/job-listings-42",
            skills=[" SQL ", "", "Python"],
        )
        listing = clean_fragment(fragment, "https://www.naukri.com")

        assert listing.external_id == "42"
        assert listing.title == "Data Engineer"
        assert listing.organization == "Initech"
        assert listing.location_text == "Mumbai"
        assert listing.detail_url == "https://www.naukri.com/job-listings-42"
        assert listing.skills == ["SQL", "Python"]
        assert listing.extracted_at == fragment.extracted_at


class TestDedupeStage:
    """Test duplicate removal by each key."""

    def _listings(self):
        fragments = [
            make_fragment("1", detail_url="https://x.com/a"),
            make_fragment("1", detail_url="https://x.com/b"),
            make_fragment("2", detail_url="https://x.com/a"),
            make_fragment(None, detail_url=None),
            make_fragment(None, detail_url=None),
        ]
        return [clean_fragment(f) for f in fragments]

    def test_by_external_id_first_wins(self):
        kept, removed = remove_duplicates(self._listings(), DedupeKey.EXTERNAL_ID)
        assert removed == 1
        assert [l.external_id for l in kept] == ["1", "2", None, None]
        assert kept[0].detail_url == "https://x.com/a"

    def test_by_detail_url(self):
        kept, removed = remove_duplicates(self._listings(), DedupeKey.DETAIL_URL)
        assert removed == 1
        assert [l.external_id for l in kept] == ["1", "1", None, None]

    def test_by_both(self):
        kept, removed = remove_duplicates(self._listings(), DedupeKey.BOTH)
        assert removed == 0
        assert len(kept) == 5


class TestValidateStage:
    """Test the keep/drop rule."""

    def test_needs_title_or_organization(self):
        listing = clean_fragment(make_fragment("1", title=None, organization=None))
        assert is_valid_listing(listing) is False

    def test_needs_id_or_url(self):
        assert is_valid_listing(clean_fragment(make_fragment(None))) is False
        assert is_valid_listing(clean_fragment(make_fragment(None, detail_url="https://x.com/a"))) is True
        assert is_valid_listing(clean_fragment(make_fragment("7", title=None))) is True

    def test_filter_counts_drops(self):
        listings = [clean_fragment(make_fragment(str(i))) for i in range(3)]
        listings.append(clean_fragment(make_fragment(None)))
        kept, dropped = filter_valid(listings)
        assert len(kept) == 3
        assert dropped == 1


class TestProcessFragments:
    """Test the full pipeline."""

    def _scenario_fragments(self):
        fragments = [make_fragment(f"job-{i}", title=f"Engineer {i}") for i in range(12)]
        fragments.insert(3, make_fragment("job-1", title="Engineer 1 (repost)"))
        fragments.insert(8, make_fragment("job-5", title="Engineer 5 (repost)"))
        fragments.append(make_fragment("job-99", title=None, organization=None))
        return fragments

    def test_fifteen_fragments_scenario(self):
        fragments = self._scenario_fragments()
        assert len(fragments) == 15

        result = process_fragments(fragments)

        assert result.stats.original == 15
        assert result.stats.duplicates_removed == 2
        assert result.stats.invalid_removed == 1
        assert result.stats.final == 12
        assert len(result.listings) == 12
        assert result.listings[1].title == "Engineer 1"

    def test_survivor_order_preserved(self):
        result = process_fragments(self._scenario_fragments())
        assert [l.external_id for l in result.listings] == [f"job-{i}" for i in range(12)]

    def test_counts_are_conserved(self):
        fragments = self._scenario_fragments() + [
            make_fragment(None, detail_url="/x"),
            make_fragment(None, title=None, organization=None),
            make_fragment("job-3"),
        ]
        for key in DedupeKey:
            stats = process_fragments(fragments, dedupe_by=key).stats
            assert stats.final + stats.duplicates_removed + stats.invalid_removed == stats.original

    def test_idempotent(self):
        fragments = self._scenario_fragments() + [
            make_fragment("job-50", organization="Acme (12 reviews)", location_text="in  Delhi â€¢ Remote",
                          detail_url="/job-listings-50"),
            make_fragment("job-51", location_text="• in Pune", detail_url="/job-listings-51"),
        ]
        first = process_fragments(fragments, base_url="https://www.naukri.com")
        second = process_fragments(first.listings, base_url="https://www.naukri.com")

        assert second.stats.duplicates_removed == 0
        assert second.stats.invalid_removed == 0
        assert second.listings == first.listings

    def test_empty_input(self):
        result = process_fragments([])
        assert result.listings == []
        assert result.stats.final == 0

    def test_keep_invalid_when_asked(self):
        fragments = [make_fragment(None), make_fragment("1")]
        result = process_fragments(fragments, remove_invalid=False)
        assert result.stats.final == 2
        assert result.stats.invalid_removed == 0


class TestSortListings:
    """Test sorting helper."""

    def test_sort_by_title(self):
        listings = [clean_fragment(make_fragment(str(i), title=t)) for i, t in enumerate(["b", None, "A", "c"])]
        titles = [l.title for l in sort_listings(listings, by='title', descending=False)]
        assert titles == ["A", "b", "c", None]

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            sort_listings([], by='salary')
