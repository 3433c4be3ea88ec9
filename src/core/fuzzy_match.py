"""Fuzzy matching of search patterns against work item titles.

Scoring is subsequence based: every pattern character must appear in the title in
order, contiguous runs and matches at word starts score higher. Raw scores are then
normalized to 0-100 with a ceiling that depends on pattern length, so short and long
patterns can share one threshold.
"""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.config import Constants, Settings
from src.models.service_models import MatchResult


SEPARATORS = frozenset(" -_./\\:")

SCORE_MATCH = 1
BONUS_BOUNDARY = 2
BONUS_CONSECUTIVE = 2
PENALTY_GAP = 1

SHORT_PATTERN_LENGTH = 3
SHORT_PATTERN_BOOST = 30

_NO_MATCH = float("-inf")


class MatchConfig(BaseModel):
    """Immutable matcher settings passed into each search."""

    model_config = ConfigDict(frozen=True)

    min_score: int = Field(default=60, description="Minimum score a match must reach (0-100)")
    max_results: int = Field(default=10, description="Results kept by callers that truncate (0 = unlimited)")

    @field_validator("min_score")
    @classmethod
    def clamp_min_score(cls, v: int) -> int:
        """Clamp out-of-range thresholds instead of rejecting them."""
        return max(Constants.MIN_SCORE, min(Constants.MAX_SCORE, v))

    @field_validator("max_results")
    @classmethod
    def clamp_max_results(cls, v: int) -> int:
        return max(0, v)

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "MatchConfig":
        return cls(min_score=app_settings.fuzzy_min_score, max_results=app_settings.fuzzy_max_results)


def _expand(text: str) -> list[tuple[str, bool]]:
    """Case-fold text into (char, is_word_start) pairs.

    Word starts are taken from the original casing so camelCase humps count.
    """
    chars: list[tuple[str, bool]] = []
    prev = ""
    for index, original in enumerate(text):
        boundary = index == 0 or prev in SEPARATORS or (prev.islower() and original.isupper())
        for offset, folded in enumerate(original.casefold()):
            chars.append((folded, boundary and offset == 0))
        prev = original
    return chars


def raw_score(pattern: str, candidate: str) -> int:
    """Best-alignment subsequence score of pattern within candidate (0 if not a subsequence)."""
    needle = pattern.strip().casefold()
    haystack = _expand(candidate.strip())
    if not needle or len(needle) > len(haystack):
        return 0

    # previous[j]: best score with the previous pattern char matched at haystack[j]
    previous: list[float] = []
    for row, char in enumerate(needle):
        current: list[float] = [_NO_MATCH] * len(haystack)
        best_before = _NO_MATCH  # best previous[k] for k < j - 1
        for j, (text_char, boundary) in enumerate(haystack):
            if row > 0 and j >= 2:
                best_before = max(best_before, previous[j - 2])
            if text_char != char:
                continue
            gained = SCORE_MATCH + (BONUS_BOUNDARY if boundary else 0)
            if row == 0:
                current[j] = gained
                continue
            options = [best_before - PENALTY_GAP]
            if j >= 1:
                options.append(previous[j - 1] + BONUS_CONSECUTIVE)
            best = max(options)
            if best != _NO_MATCH:
                current[j] = best + gained
        previous = current

    best_total = max(previous, default=_NO_MATCH)
    return 0 if best_total == _NO_MATCH else int(best_total)


def normalize_score(raw: int, pattern_length: int) -> int:
    """Map a raw score onto 0-100 using a ceiling that grows with pattern length."""
    if raw <= 0 or pattern_length <= 0:
        return 0

    if pattern_length <= 2:  # noqa: PLR2004
        ceiling = pattern_length * 2
    elif pattern_length <= 4:  # noqa: PLR2004
        ceiling = pattern_length * 3
    else:
        ceiling = pattern_length * 4

    # round half up
    percentage = (raw * 200 + ceiling) // (2 * ceiling)

    # A short pattern matched in full is a strong signal
    if pattern_length <= SHORT_PATTERN_LENGTH and raw >= pattern_length:
        percentage += SHORT_PATTERN_BOOST

    return min(Constants.MAX_SCORE, percentage)


def score(pattern: str, candidate: str) -> int:
    """Normalized 0-100 similarity of pattern to candidate."""
    needle = pattern.strip().casefold()
    if not needle:
        return 0
    return normalize_score(raw_score(needle, candidate), len(needle))


def find_matches(
    pattern: str,
    candidates: Sequence[str],
    config: MatchConfig | None = None,
) -> list[MatchResult]:
    """Score every candidate and return those at or above the threshold, best first.

    Ties keep candidate order. An empty pattern means no search and returns [].
    Results are never truncated here.
    """
    config = config or MatchConfig()
    needle = pattern.strip().casefold()
    if not needle:
        return []

    results = []
    for index, candidate in enumerate(candidates):
        raw = raw_score(needle, candidate)
        if raw <= 0:
            continue
        value = normalize_score(raw, len(needle))
        if value >= config.min_score:
            results.append(MatchResult(candidate_index=index, score=value))

    # sorted() is stable, so equal scores stay in candidate order
    return sorted(results, key=lambda result: result.score, reverse=True)


def find_best_match(
    pattern: str,
    candidates: Sequence[str],
    config: MatchConfig | None = None,
) -> MatchResult | None:
    """Highest scoring match, or None."""
    matches = find_matches(pattern, candidates, config)
    return matches[0] if matches else None


def is_match(pattern: str, text: str, config: MatchConfig | None = None) -> bool:
    return bool(find_matches(pattern, [text], config))


def find_substring_matches(pattern: str, candidates: Sequence[str]) -> list[MatchResult]:
    """Case-insensitive containment hits, each scored at the fixed fallback score."""
    needle = pattern.strip().casefold()
    if not needle:
        return []
    return [
        MatchResult(candidate_index=index, score=Constants.SUBSTRING_FALLBACK_SCORE)
        for index, candidate in enumerate(candidates)
        if needle in candidate.casefold()
    ]


def find_matches_with_fallback(
    pattern: str,
    candidates: Sequence[str],
    config: MatchConfig | None = None,
) -> list[MatchResult]:
    """Fuzzy matches, falling back to substring containment only when there are none."""
    matches = find_matches(pattern, candidates, config)
    if matches:
        return matches
    return find_substring_matches(pattern, candidates)


def filter_by_score(matches: Sequence[MatchResult], min_score: int) -> list[MatchResult]:
    return [match for match in matches if match.score >= min_score]


def limit_results(matches: Sequence[MatchResult], limit: int) -> list[MatchResult]:
    """First `limit` matches; a limit of 0 or less keeps everything."""
    if limit <= 0:
        return list(matches)
    return list(matches[:limit])
