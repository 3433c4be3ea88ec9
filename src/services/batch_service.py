"""Batch executor applying one update payload to many work items.

Lifecycle: built -> (dry_run | applying) -> done. A dry run walks the same targets
in the same order as a live run and makes no remote calls. A live run calls the
mutator once per target, records a failure without stopping, and only publishes
its summary once every target has been processed.
"""

import asyncio
import logging
from collections.abc import Sequence
from enum import StrEnum

from src.core.config import Constants
from src.core.errors import RemoteError, classify_remote_error
from src.core.logging import span
from src.domain.update_models import FIELD_LABELS, WorkItemUpdate, format_value
from src.domain.work_item import WorkItem, WorkItemMutator
from src.models.service_models import BatchOutcome, BatchPreview, BatchSummary


logger = logging.getLogger(__name__)


class BatchState(StrEnum):
    """Batch executor lifecycle state."""

    BUILT = "built"
    DRY_RUN = "dry_run"
    APPLYING = "applying"
    DONE = "done"


BATCH_TRANSITIONS: dict[BatchState, set[BatchState]] = {
    BatchState.BUILT: {BatchState.DRY_RUN, BatchState.APPLYING},
    BatchState.DRY_RUN: {BatchState.DONE},
    BatchState.APPLYING: {BatchState.DONE},
    BatchState.DONE: set(),
}


def truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def describe_change(target: WorkItem, payload: WorkItemUpdate) -> str:
    """One preview line: which fields of target would change and how."""
    changes: list[str] = []
    for name in payload.changed_fields():
        label = FIELD_LABELS[name]
        # descriptions are too long to show inline
        if name == "description_html":
            changes.append(f"{label}: {payload.describe_field(name)}")
            continue
        current = getattr(target, name, None)
        changes.append(f"{label}: {format_value(current)} -> {format_value(getattr(payload, name))}")

    header = f"[{target.sequence_id}] {truncate(target.name, Constants.PREVIEW_TITLE_WIDTH)}"
    return f"{header}: {'; '.join(changes)}" if changes else f"{header}: (no changes)"


def preview_lines(targets: Sequence[WorkItem], payload: WorkItemUpdate) -> list[BatchPreview]:
    """One preview per target, in target order."""
    return [BatchPreview(target_id=target.id, line=describe_change(target, payload)) for target in targets]


class BatchExecutor:
    """Applies a single WorkItemUpdate to an ordered list of targets.

    Each executor runs once: either preview() or apply(), never both.
    """

    def __init__(
        self,
        *,
        targets: Sequence[WorkItem],
        payload: WorkItemUpdate,
        mutator: WorkItemMutator,
        max_concurrency: int = 1,
    ) -> None:
        self._targets = list(targets)
        self._payload = payload
        self._mutator = mutator
        self._max_concurrency = max(1, min(Constants.MAX_BULK_CONCURRENCY, max_concurrency))
        self._state = BatchState.BUILT
        self._summary: BatchSummary | None = None

    @property
    def state(self) -> BatchState:
        return self._state

    @property
    def targets(self) -> list[WorkItem]:
        return list(self._targets)

    @property
    def summary(self) -> BatchSummary | None:
        """Aggregate outcome, available only once a live run is done."""
        return self._summary

    def _transition(self, new_state: BatchState) -> None:
        if new_state not in BATCH_TRANSITIONS[self._state]:
            msg = f"Cannot move batch from {self._state} to {new_state}"
            raise ValueError(msg)
        self._state = new_state

    def preview(self) -> list[BatchPreview]:
        """Describe what a live run would do to each target, without calling the mutator."""
        with span("batch_service.preview", batch_size=len(self._targets)):
            self._transition(BatchState.DRY_RUN)
            previews = preview_lines(self._targets, self._payload)
            self._transition(BatchState.DONE)

            logger.info("Previewed bulk update of %d work items", len(previews))
            return previews

    async def apply(self) -> BatchSummary:
        """Apply the payload to every target and return the aggregate outcome.

        A failed target never stops the batch. Outcomes keep target order regardless
        of concurrency.
        """
        with span("batch_service.apply", batch_size=len(self._targets), concurrency=self._max_concurrency):
            self._transition(BatchState.APPLYING)

            if self._max_concurrency == 1:
                outcomes = [await self._apply_one(target) for target in self._targets]
            else:
                semaphore = asyncio.Semaphore(self._max_concurrency)

                async def bounded(target: WorkItem) -> BatchOutcome:
                    async with semaphore:
                        return await self._apply_one(target)

                outcomes = list(await asyncio.gather(*(bounded(target) for target in self._targets)))

            summary = BatchSummary.from_outcomes(outcomes)
            self._summary = summary
            self._transition(BatchState.DONE)

            logger.info(
                "Completed bulk update: %d/%d work items updated successfully",
                summary.success_count,
                summary.total,
            )
            if summary.failure_count:
                logger.warning(
                    "Bulk update finished with failures",
                    extra={"failure_count": summary.failure_count, "failed_ids": summary.failed_target_ids()},
                )
            return summary

    async def _apply_one(self, target: WorkItem) -> BatchOutcome:
        try:
            await self._mutator.update_work_item(target.id, self._payload)
        except Exception as e:
            error = RemoteError(target.id, e)
            response = classify_remote_error(error)
            logger.warning(
                "Failed to update work item [%d] %s: %s",
                target.sequence_id,
                truncate(target.name, 40),
                error,
                extra={"work_item_id": target.id, "error_code": response.code},
            )
            return BatchOutcome(target_id=target.id, succeeded=False, error=str(error), error_code=response.code)

        logger.debug("Updated work item [%d] %s", target.sequence_id, truncate(target.name, 40))
        return BatchOutcome(target_id=target.id, succeeded=True)
