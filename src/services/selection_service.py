"""Narrowing a project's work items down to update targets."""

import logging
from collections.abc import Sequence

from src.core.errors import NotFoundError, ValidationError
from src.core.fuzzy_match import MatchConfig, find_matches, find_matches_with_fallback, limit_results
from src.core.logging import span
from src.domain.work_item import Candidate, WorkItem


logger = logging.getLogger(__name__)


SELECT_ALL = frozenset({"all", "a"})
SELECT_NONE = frozenset({"cancel", "c"})


def _candidate_titles(items: Sequence[WorkItem]) -> list[str]:
    """Snapshot each work item as a Candidate and return the titles in item order."""
    return [candidate.title for candidate in map(Candidate.from_work_item, items)]


def search_work_items(
    pattern: str,
    items: Sequence[WorkItem],
    config: MatchConfig | None = None,
) -> list[tuple[WorkItem, int]]:
    """Ranked (work item, score) pairs for display, truncated to config.max_results.

    Uses fuzzy scoring only; an empty pattern returns [].
    """
    config = config or MatchConfig()
    matches = find_matches(pattern, _candidate_titles(items), config)
    return [(items[match.candidate_index], match.score) for match in limit_results(matches, config.max_results)]


def select_targets(
    pattern: str,
    items: Sequence[WorkItem],
    config: MatchConfig | None = None,
) -> list[WorkItem]:
    """All work items matching pattern, best first.

    Falls back to case-insensitive substring containment when fuzzy matching finds nothing.

    Raises:
        ValidationError: If pattern is empty
        NotFoundError: If nothing matches
    """
    with span("selection_service.select_targets", pattern=pattern):
        if not pattern.strip():
            msg = "Search pattern must not be empty"
            raise ValidationError(msg)

        matches = find_matches_with_fallback(pattern, _candidate_titles(items), config)
        if not matches:
            msg = f"No work items found matching '{pattern}'"
            raise NotFoundError(msg)

        targets = [items[match.candidate_index] for match in matches]
        logger.info("Found %d work items matching '%s'", len(targets), pattern)
        return targets


def parse_selection(text: str, count: int) -> list[int]:
    """Parse a selection such as "1, 3" into 0-based indices.

    "all"/"a" selects every index, "cancel"/"c" selects none. Entries are 1-based;
    non-numeric, out-of-range and repeated entries are ignored.
    """
    normalized = text.strip().lower()
    if normalized in SELECT_ALL:
        return list(range(count))
    if normalized in SELECT_NONE:
        return []

    selected: list[int] = []
    for entry in normalized.split(","):
        part = entry.strip()
        if not part.isdecimal():
            continue
        number = int(part)
        if 0 < number <= count and number - 1 not in selected:
            selected.append(number - 1)
    return selected


def apply_selection(items: Sequence[WorkItem], selection: str) -> list[WorkItem]:
    """Subset of items picked by a selection string, in selection order."""
    return [items[index] for index in parse_selection(selection, len(items))]
