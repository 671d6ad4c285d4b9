"""
Tests for company directory search.
"""

from pitchsite.services.companies import levenshtein_distance, search_companies


class TestSearchCompanies:
    """Tests for search_companies."""

    def test_short_query(self):
        assert search_companies("a") == []
        assert search_companies("  ") == []

    def test_exact_match_first(self):
        assert search_companies("Apple")[0].domain == "apple.com"

    def test_domain_match(self):
        assert search_companies("jnj.com")[0].name == "Johnson & Johnson"

    def test_prefix_match(self):
        assert search_companies("micro")[0].name == "Microsoft"

    def test_prefix_beats_word_boundary(self):
        """'America' starts American Express but is only a word in Bank of America."""
        names = [c.name for c in search_companies("america")]

        assert names.index("American Express") < names.index("Bank of America")

    def test_typo_tolerance(self):
        assert search_companies("micrsoft")[0].name == "Microsoft"

    def test_duplicates_removed_by_domain(self):
        results = search_companies("amazon")

        assert [c.domain for c in results] == ["amazon.com"]

    def test_limit(self):
        assert len(search_companies("co", limit=3)) == 3
        assert len(search_companies("co")) <= 8


class TestLevenshtein:
    def test_distance(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0
