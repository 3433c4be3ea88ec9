"""Unit tests for fuzzy title matching."""

import pydantic
import pytest

from src.core.fuzzy_match import (
    MatchConfig,
    filter_by_score,
    find_best_match,
    find_matches,
    find_matches_with_fallback,
    find_substring_matches,
    is_match,
    limit_results,
    normalize_score,
    raw_score,
    score,
)
from src.models.service_models import MatchResult
from tests.unit.conftest import API_TITLES


@pytest.mark.unit
class TestNormalizeScore:
    """Tests for the length-aware 0-100 normalization."""

    def test_non_positive_raw_is_zero(self):
        assert normalize_score(0, 3) == 0
        assert normalize_score(-4, 3) == 0

    def test_empty_pattern_is_zero(self):
        assert normalize_score(5, 0) == 0

    def test_short_pattern_ceiling_is_twice_length(self):
        # ceiling 4, raw below pattern length: no boost
        assert normalize_score(1, 2) == 25

    def test_short_pattern_boost_when_fully_matched(self):
        # ceiling 4 -> 50%, plus 30
        assert normalize_score(2, 2) == 80

    def test_length_three_uses_triple_ceiling_and_boost(self):
        # 500 / 9 = 55.6 -> 56, plus 30
        assert normalize_score(5, 3) == 86

    def test_length_three_without_boost(self):
        assert normalize_score(2, 3) == 22

    def test_length_four_has_no_boost(self):
        assert normalize_score(6, 4) == 50

    def test_long_pattern_uses_quadruple_ceiling(self):
        assert normalize_score(10, 5) == 50

    def test_rounds_half_up(self):
        # 300 / 24 = 12.5
        assert normalize_score(3, 6) == 13

    def test_clamped_to_100(self):
        assert normalize_score(50, 5) == 100
        assert normalize_score(9, 3) == 100


@pytest.mark.unit
class TestScore:
    """Tests for pattern-vs-title scoring."""

    def test_word_start_substring_scores_full_marks(self):
        assert raw_score("api", "API integration module") == 9
        assert score("api", "API integration module") == 100

    @pytest.mark.parametrize(
        ("pattern", "candidate"),
        [
            ("a", "zzzzzzzzzzzzzzzzzzzza"),
            ("x", "Fix bug"),
            ("ap", "Rapid prototyping"),
            ("api", "xaxxapi"),
            ("api", "The rapid sprint"),
            ("bug", "Fix API authentication bug"),
            ("dat", "Update API documentation"),
        ],
    )
    def test_short_exact_substring_scores_at_least_80(self, pattern, candidate):
        assert pattern in candidate.lower()
        assert score(pattern, candidate) >= 80

    def test_case_and_whitespace_are_ignored(self):
        assert score("  API ", "update api docs") == score("api", "Update API Docs")

    def test_missing_character_scores_zero(self):
        assert score("api", "Dashboard analytics widget") == 0

    def test_pattern_longer_than_candidate_scores_zero(self):
        assert score("integration", "API") == 0

    def test_empty_pattern_scores_zero(self):
        assert score("", "anything") == 0
        assert score("   ", "anything") == 0

    def test_camel_case_hump_counts_as_word_start(self):
        assert raw_score("fb", "FooBar") > raw_score("fb", "Foobar")

    def test_contiguous_run_beats_scattered_match(self):
        assert score("docs", "Write docs") > score("docs", "Deploy orchestrator cluster services")

    def test_long_pattern_score(self):
        # 32 raw over a ceiling of 40
        assert score("update api", "Update API documentation") == 80


@pytest.mark.unit
class TestMatchConfig:
    """Tests for immutable matcher configuration."""

    def test_defaults(self):
        config = MatchConfig()
        assert config.min_score == 60
        assert config.max_results == 10

    @pytest.mark.parametrize(("given", "expected"), [(-10, 0), (0, 0), (75, 75), (100, 100), (250, 100)])
    def test_min_score_is_clamped(self, given, expected):
        assert MatchConfig(min_score=given).min_score == expected

    @pytest.mark.parametrize("field", ["min_score", "max_results"])
    def test_none_is_rejected_by_validation(self, field):
        with pytest.raises(pydantic.ValidationError):
            MatchConfig(**{field: None})

    def test_negative_max_results_means_unlimited(self):
        assert MatchConfig(max_results=-3).max_results == 0

    def test_is_frozen(self):
        config = MatchConfig()
        with pytest.raises(ValueError):
            config.min_score = 10  # type: ignore[misc]

    def test_from_settings(self, test_settings):
        test_settings.fuzzy_min_score = 70
        test_settings.fuzzy_max_results = 3
        config = MatchConfig.from_settings(test_settings)
        assert config.min_score == 70
        assert config.max_results == 3


@pytest.mark.unit
class TestFindMatches:
    """Tests for ranked, thresholded matching."""

    def test_api_scenario(self):
        matches = find_matches("api", API_TITLES, MatchConfig(min_score=60))

        assert [match.candidate_index for match in matches] == [0, 1, 2]
        assert all(match.score >= 60 for match in matches)

    def test_empty_pattern_returns_nothing(self):
        assert find_matches("", API_TITLES) == []
        assert find_matches("  ", API_TITLES, MatchConfig(min_score=0)) == []

    @pytest.mark.parametrize("min_score", [0, 25, 60, 85, 100])
    def test_results_respect_threshold_and_order(self, min_score):
        titles = [*API_TITLES, "Paginate issues", "api", "A p i spaced", "Rapid iteration"]
        matches = find_matches("api", titles, MatchConfig(min_score=min_score))

        assert all(match.score >= min_score for match in matches)
        scores = [match.score for match in matches]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_candidate_order(self):
        titles = ["api two", "zzz", "api one", "api three"]
        matches = find_matches("api", titles)

        assert [match.candidate_index for match in matches] == [0, 2, 3]

    def test_better_match_ranks_first(self):
        titles = ["Deploy orchestrator cluster services", "Write docs"]
        matches = find_matches("docs", titles, MatchConfig(min_score=0))

        assert matches[0].candidate_index == 1

    def test_does_not_truncate(self):
        titles = [f"api task {i}" for i in range(25)]
        assert len(find_matches("api", titles, MatchConfig(max_results=5))) == 25

    def test_non_matching_candidates_excluded_at_zero_threshold(self):
        matches = find_matches("api", API_TITLES, MatchConfig(min_score=0))
        assert 3 not in [match.candidate_index for match in matches]

    def test_repeatable(self):
        first = find_matches("auth", API_TITLES, MatchConfig(min_score=0))
        second = find_matches("auth", API_TITLES, MatchConfig(min_score=0))
        assert first == second

    def test_find_best_match(self):
        best = find_best_match("update api", API_TITLES)
        assert best == MatchResult(candidate_index=1, score=80)

    def test_find_best_match_none(self):
        assert find_best_match("zzz", API_TITLES) is None

    def test_is_match(self):
        assert is_match("api", "Fix API authentication bug")
        assert not is_match("api", "Dashboard analytics widget")


@pytest.mark.unit
class TestSubstringFallback:
    """Tests for the substring fallback used when fuzzy matching finds nothing."""

    def test_substring_matches_score_50(self):
        matches = find_substring_matches("API", API_TITLES)

        assert [match.candidate_index for match in matches] == [0, 1, 2]
        assert {match.score for match in matches} == {50}

    def test_fallback_only_when_fuzzy_is_empty(self):
        matches = find_matches_with_fallback("tegration mod", API_TITLES, MatchConfig(min_score=100))
        assert matches == [MatchResult(candidate_index=0, score=50)]

    def test_fallback_does_not_replace_fuzzy_results(self):
        matches = find_matches_with_fallback("api", API_TITLES, MatchConfig(min_score=60))
        assert all(match.score > 50 for match in matches)

    def test_no_results_anywhere(self):
        assert find_matches_with_fallback("kubernetes", API_TITLES) == []

    def test_empty_pattern(self):
        assert find_substring_matches("", API_TITLES) == []


@pytest.mark.unit
class TestResultHelpers:
    """Tests for filter_by_score and limit_results."""

    def test_filter_by_score(self):
        matches = [MatchResult(candidate_index=0, score=90), MatchResult(candidate_index=1, score=40)]
        assert filter_by_score(matches, 50) == [matches[0]]

    def test_limit_results(self):
        matches = [MatchResult(candidate_index=i, score=100) for i in range(5)]
        assert limit_results(matches, 2) == matches[:2]
        assert limit_results(matches, 0) == matches
        assert limit_results(matches, 10) == matches
