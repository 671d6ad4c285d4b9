"""
Tests for social-proof customer selection.
"""

import pytest

from pitchsite.models.schemas import CompanySize, Region, SizeBracket
from pitchsite.services.social_proof import (
    CUSTOMERS,
    company_initials,
    region_for_location,
    select_customers,
    size_bracket,
)


class TestSelectCustomers:
    """Tests for select_customers."""

    @pytest.mark.parametrize("count", [0, 1, 6, 100])
    def test_never_more_than_count(self, count):
        result = select_customers("Manufacturing", "50-200 employees", count=count)

        assert len(result) == min(count, len(CUSTOMERS))

    def test_negative_count(self):
        assert select_customers("Healthcare", "small", count=-3) == []

    def test_same_region_and_industry_first(self):
        """Region (+100) and industry (+50) dominate the ranking."""
        result = select_customers("Technology", "200+ employees", location="Texas")

        assert {c.name for c in result[:2]} == {"Texas Instruments", "Dell Technologies"}
        assert all(c.region == Region.SOUTHWEST for c in result[:2])

    def test_region_label_matches_state(self):
        by_state = select_customers("Education", "large", location="Ohio")
        by_region = select_customers("Education", "large", location="midwest")

        assert [c.name for c in by_state] == [c.name for c in by_region]

    def test_industry_without_location(self):
        result = select_customers("Healthcare", "1-10 employees", count=6)

        assert all(c.industry == "Healthcare" for c in result)
        assert [c.size for c in result[:3]] == [SizeBracket.ENTERPRISE] * 3

    def test_ties_keep_list_order(self):
        """Equal scores come back in reference-list order."""
        result = select_customers("Healthcare", "1-10 employees", count=3)

        assert [c.name for c in result] == ["Pfizer", "Johnson & Johnson", "Bristol Myers"]

    def test_unknown_location_ignored(self):
        assert select_customers("Retail", "medium", location="Atlantis") == select_customers("Retail", "medium")


class TestHelpers:
    """Size mapping, region lookup and initials."""

    @pytest.mark.parametrize("size, expected", [
        (CompanySize.MICRO, SizeBracket.SMALL),
        ("10-50 employees", SizeBracket.MEDIUM),
        ("50-200 employees", SizeBracket.LARGE),
        ("200+ employees", SizeBracket.ENTERPRISE),
        ("Enterprise", SizeBracket.ENTERPRISE),
        ("unknown", SizeBracket.MEDIUM),
        (None, SizeBracket.MEDIUM),
    ])
    def test_size_bracket(self, size, expected):
        assert size_bracket(size) == expected

    def test_region_for_location(self):
        assert region_for_location("north carolina") == Region.SOUTHEAST
        assert region_for_location("International") == Region.INTERNATIONAL
        assert region_for_location(None) is None

    @pytest.mark.parametrize("name, expected", [
        ("John Deere", "JD"),
        ("3M", "3M"),
        ("UCLA", "UC"),
        ("Coca-Cola", "CO"),
    ])
    def test_company_initials(self, name, expected):
        assert company_initials(name) == expected

    def test_references_have_initials(self):
        assert all(c.initials for c in CUSTOMERS)
