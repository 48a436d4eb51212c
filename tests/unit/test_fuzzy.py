"""Unit tests for fuzzy search."""

import pytest

from capgraph.graph.hierarchy import HierarchyResult
from capgraph.search.fuzzy import FuzzyMatcher, fuzzy_match, normalize


class TestFuzzyMatch:
    """Tests for the scoring ladder."""

    def test_normalize(self) -> None:
        """Test separator and case normalization."""
        assert normalize("Read_File-Now") == "read file now"

    @pytest.mark.parametrize("text", ["filesystem", "Read_File", "postgres query", "x"])
    def test_reflexive(self, text: str) -> None:
        """Test that any non-empty string matches itself exactly."""
        assert fuzzy_match(text, text).score == 1.0

    def test_separators_equal(self) -> None:
        """Test that underscores and dashes compare as spaces."""
        assert fuzzy_match("read_file", "READ-FILE").score == 1.0

    def test_substring(self) -> None:
        """Test whole-query substring matches."""
        match = fuzzy_match("Read Config File", "config")
        assert match.matches
        assert match.score == 0.9

    def test_words_found_in_target(self) -> None:
        """Test per-word scoring when every word occurs in the target."""
        match = fuzzy_match("filesystem", "fil sys")
        assert match.matches
        assert match.score == pytest.approx(0.9)

    def test_prefix(self) -> None:
        """Test that a target word prefixing a query word scores 0.7."""
        match = fuzzy_match("data base", "database")
        assert match.matches
        assert match.score == pytest.approx(0.7)

    def test_typo(self) -> None:
        """Test typo tolerance for transposed characters."""
        match = fuzzy_match("postgres query", "qeury")
        assert match.matches
        assert match.score == pytest.approx(0.5)

    def test_best_word_score_wins(self) -> None:
        """Test that a later prefix hit beats an earlier typo hit."""
        match = fuzzy_match("filesq files", "filesx")
        assert match.matches
        assert match.score == pytest.approx(0.7)

    def test_typo_needs_long_words(self) -> None:
        """Test that short words get no typo tolerance."""
        assert not fuzzy_match("cat", "cta").matches

    def test_mixed_words_average(self) -> None:
        """Test that the score is the mean of the word scores."""
        match = fuzzy_match("postgres query", "post qeury")
        assert match.score == pytest.approx((0.9 + 0.5) / 2)

    def test_every_word_must_match(self) -> None:
        """Test that one unmatched word rejects the target."""
        assert not fuzzy_match("filesystem read", "read network").matches

    def test_no_match(self) -> None:
        """Test unrelated strings."""
        match = fuzzy_match("filesystem", "network")
        assert not match.matches
        assert match.score == 0.0

    @pytest.mark.parametrize(("target", "query"), [("", "abc"), ("abc", ""), (None, "abc"), ("abc", "   ")])
    def test_empty_never_matches(self, target: str | None, query: str) -> None:
        """Test that empty inputs never match."""
        assert not fuzzy_match(target, query).matches

    def test_single_char_words_ignored(self) -> None:
        """Test that queries made of one-letter words do not match."""
        assert not fuzzy_match("filesystem", "q z").matches


class TestFuzzyMatcher:
    """Tests for multi-field capability ranking."""

    def test_rank_across_fields(self, sample_hierarchy: HierarchyResult) -> None:
        """Test name, description and tool matches, sorted by score then name."""
        results = FuzzyMatcher().rank(sample_hierarchy.walk(), "file")
        assert [(r.id, r.matched_field) for r in results] == [
            ("cap-file-ops", "name"),
            ("cap-read-config", "description"),
        ]
        assert all(r.score == 0.9 for r in results)

    def test_match_by_server(self, sample_hierarchy: HierarchyResult) -> None:
        """Test that tool servers are searchable."""
        results = FuzzyMatcher().rank(sample_hierarchy.walk(), "postgres")
        assert [(r.id, r.matched_field, r.score) for r in results] == [
            ("cap-db-sync", "server", 1.0)
        ]

    def test_short_query(self, sample_hierarchy: HierarchyResult) -> None:
        """Test that queries below the minimum length return nothing."""
        assert FuzzyMatcher().rank(sample_hierarchy.walk(), "f") == []

    def test_max_results(self, sample_hierarchy: HierarchyResult) -> None:
        """Test result truncation."""
        results = FuzzyMatcher(max_results=1).rank(sample_hierarchy.walk(), "file")
        assert [r.id for r in results] == ["cap-file-ops"]

    def test_to_dict(self, sample_hierarchy: HierarchyResult) -> None:
        """Test camelCase result output."""
        (result,) = FuzzyMatcher().rank(sample_hierarchy.walk(), "database sync")
        data = result.to_dict()
        assert data["matchedField"] == "name"
        assert data["toolCount"] == 1
