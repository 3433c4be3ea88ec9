"""Pydantic models for service layer return types.

These models provide type safety at service boundaries. All of them are value
objects produced fresh by a single call and never shared across calls.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from src.core.errors import PartialBatchFailure
from src.domain.update_models import WorkItemUpdate
from src.domain.work_item import WorkItem


class MatchResult(BaseModel):
    """Index of a matched candidate and its normalized score."""

    model_config = ConfigDict(frozen=True)

    candidate_index: int = Field(..., ge=0)
    score: int = Field(..., ge=0, le=100)


class BatchPreview(BaseModel):
    """What a bulk update would do to one target."""

    target_id: str
    line: str


class BatchOutcome(BaseModel):
    """Result of applying the update payload to one target."""

    target_id: str
    succeeded: bool
    error: str | None = None
    error_code: str | None = None


class BatchSummary(BaseModel):
    """Aggregate of a completed batch, outcomes in original target order."""

    success_count: int
    failure_count: int
    outcomes: list[BatchOutcome]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return len(self.outcomes)

    @classmethod
    def from_outcomes(cls, outcomes: list[BatchOutcome]) -> "BatchSummary":
        succeeded = sum(1 for outcome in outcomes if outcome.succeeded)
        return cls(success_count=succeeded, failure_count=len(outcomes) - succeeded, outcomes=outcomes)

    def failed_target_ids(self) -> list[str]:
        """Target IDs to feed into a follow-up batch."""
        return [outcome.target_id for outcome in self.outcomes if not outcome.succeeded]

    def raise_for_failures(self) -> None:
        """Raise PartialBatchFailure if any target failed."""
        if self.failure_count > 0:
            raise PartialBatchFailure(self)


class BulkUpdateResult(BaseModel):
    """Result of a bulk update run (dry run or live)."""

    targets: list[WorkItem]
    payload: WorkItemUpdate
    dry_run: bool
    previews: list[BatchPreview] = Field(default_factory=list)
    summary: BatchSummary | None = None
