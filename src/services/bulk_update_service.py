"""Bulk update and update-by-title workflows.

Both workflows fetch the project's work items once, narrow them to targets, build a
single WorkItemUpdate and hand it to a BatchExecutor. Interactive selection is the
caller's job: it arrives here as a search pattern, a selection string or target IDs.
"""

import logging
from collections.abc import Sequence

from pydantic import BaseModel, Field, field_validator

from src.core.config import Settings, settings
from src.core.errors import NotFoundError, ValidationError
from src.core.fuzzy_match import MatchConfig
from src.core.logging import span
from src.domain.update_models import WorkItemUpdate
from src.domain.work_item import Priority, WorkItem, WorkItemMutator, WorkItemSource
from src.models.service_models import BulkUpdateResult
from src.services.batch_service import BatchExecutor, preview_lines
from src.services.merge_service import MergeMode, MergeRequest, parse_mode
from src.services.selection_service import apply_selection, search_work_items, select_targets


logger = logging.getLogger(__name__)


class BulkUpdateRequest(BaseModel):
    """What to update and which work items to update."""

    search: str = Field(default="", description="Fuzzy search pattern selecting the targets")
    target_ids: list[str] | None = Field(default=None, description="Explicit targets, used instead of search")
    min_score: int | None = Field(default=None, description="Override for the configured minimum score")

    assignees: list[str] | None = Field(default=None, description="Assignee member IDs")
    assignee_mode: MergeMode = Field(default=MergeMode.ADD, description="How assignees combine with existing ones")
    labels: list[str] | None = Field(default=None, description="Label IDs")
    label_mode: MergeMode = Field(default=MergeMode.ADD, description="How labels combine with existing ones")
    estimate_point: float | None = Field(default=None, ge=0, description="Estimate points")
    module: str | None = Field(default=None, description="Module ID")
    state: str | None = Field(default=None, description="State ID")
    priority: Priority | None = Field(default=None, description="Priority")

    dry_run: bool = Field(default=False, description="Preview changes without applying")

    @field_validator("assignee_mode", "label_mode", mode="before")
    @classmethod
    def validate_mode(cls, v: MergeMode | str) -> MergeMode:
        return parse_mode(v)


def _apply_list_change(
    payload: WorkItemUpdate,
    *,
    field: str,
    incoming: list[str] | None,
    mode: MergeMode,
    targets: Sequence[WorkItem],
) -> None:
    """Set a list field on payload when the request touches it.

    CLEAR always touches the field. ADD with nothing incoming is not a change.
    """
    if mode != MergeMode.CLEAR and (incoming is None or (mode == MergeMode.ADD and not incoming)):
        return

    request = MergeRequest.for_targets(
        mode=mode,
        incoming=incoming or [],
        existing_per_target={target.id: getattr(target, field) for target in targets},
    )
    request.apply_to(payload, field)


def build_payload(targets: Sequence[WorkItem], request: BulkUpdateRequest) -> WorkItemUpdate:
    """Single update payload applied to every target.

    Raises:
        ValidationError: If the request changes nothing
    """
    payload = WorkItemUpdate()

    _apply_list_change(
        payload, field="assignees", incoming=request.assignees, mode=request.assignee_mode, targets=targets
    )
    if request.estimate_point is not None:
        payload.estimate_point = request.estimate_point
    _apply_list_change(payload, field="labels", incoming=request.labels, mode=request.label_mode, targets=targets)
    if request.module:
        payload.module = request.module
    if request.state:
        payload.state = request.state
    if request.priority:
        payload.priority = request.priority

    if not payload.has_changes():
        msg = "No updates specified"
        raise ValidationError(msg)
    return payload


def _targets_by_id(items: Sequence[WorkItem], target_ids: Sequence[str]) -> list[WorkItem]:
    by_id = {item.id: item for item in items}
    missing = [target_id for target_id in target_ids if target_id not in by_id]
    if missing:
        msg = f"Work items not found: {', '.join(missing)}"
        raise NotFoundError(msg)
    return [by_id[target_id] for target_id in dict.fromkeys(target_ids)]


async def _run_batch(
    *,
    targets: list[WorkItem],
    payload: WorkItemUpdate,
    mutator: WorkItemMutator,
    dry_run: bool,
    app_settings: Settings,
) -> BulkUpdateResult:
    executor = BatchExecutor(
        targets=targets,
        payload=payload,
        mutator=mutator,
        max_concurrency=app_settings.bulk_max_concurrency,
    )
    if dry_run:
        return BulkUpdateResult(targets=targets, payload=payload, dry_run=True, previews=executor.preview())

    previews = preview_lines(targets, payload)
    summary = await executor.apply()
    return BulkUpdateResult(targets=targets, payload=payload, dry_run=False, previews=previews, summary=summary)


async def bulk_update(
    *,
    source: WorkItemSource,
    mutator: WorkItemMutator,
    project_id: str,
    request: BulkUpdateRequest,
    app_settings: Settings | None = None,
) -> BulkUpdateResult:
    """Update every work item selected by request with the same values.

    Args:
        source: Supplies the project's work items
        mutator: Applies the update to one work item
        project_id: Project to update
        request: Selection and field changes
        app_settings: Settings override (defaults to environment settings)

    Returns:
        BulkUpdateResult with previews, plus a summary for live runs

    Raises:
        ValidationError: If neither search nor target_ids is given, or nothing would change
        NotFoundError: If the project is empty or nothing matches
    """
    app_settings = app_settings or settings
    with span("bulk_update_service.bulk_update", project_id=project_id, dry_run=request.dry_run):
        items = await source.list_work_items(project_id)
        if not items:
            msg = f"No work items found in project '{project_id}'"
            raise NotFoundError(msg)

        if request.target_ids is not None:
            targets = _targets_by_id(items, request.target_ids)
        elif request.search.strip():
            config = MatchConfig(
                min_score=request.min_score if request.min_score is not None else app_settings.fuzzy_min_score,
                max_results=app_settings.fuzzy_max_results,
            )
            targets = select_targets(request.search, items, config)
        else:
            msg = "Either a search pattern or target IDs is required"
            raise ValidationError(msg)

        if not targets:
            msg = "No work items selected"
            raise ValidationError(msg)

        payload = build_payload(targets, request)
        logger.info(
            "Bulk updating %d work items in project %s",
            len(targets),
            project_id,
            extra={"fields": payload.changed_fields(), "dry_run": request.dry_run},
        )

        return await _run_batch(
            targets=targets, payload=payload, mutator=mutator, dry_run=request.dry_run, app_settings=app_settings
        )


async def update_by_title(
    *,
    source: WorkItemSource,
    mutator: WorkItemMutator,
    project_id: str,
    pattern: str,
    payload: WorkItemUpdate,
    selection: str = "all",
    dry_run: bool = False,
    min_score: int | None = None,
    app_settings: Settings | None = None,
) -> BulkUpdateResult:
    """Update the work items whose titles approximately match pattern.

    Matches are ranked and truncated to the configured max results; selection then
    picks among them ("all", "cancel" or 1-based numbers such as "1,3").

    Raises:
        ValidationError: If pattern is empty or payload changes nothing
        NotFoundError: If no title reaches the minimum score
    """
    app_settings = app_settings or settings
    with span("bulk_update_service.update_by_title", project_id=project_id, pattern=pattern):
        if not pattern.strip():
            msg = "Search pattern must not be empty"
            raise ValidationError(msg)
        if not payload.has_changes():
            msg = "No updates specified"
            raise ValidationError(msg)

        items = await source.list_work_items(project_id)
        config = MatchConfig(
            min_score=min_score if min_score is not None else app_settings.fuzzy_min_score,
            max_results=app_settings.fuzzy_max_results,
        )
        ranked = search_work_items(pattern, items, config)
        if not ranked:
            msg = f"No work items found matching '{pattern}'"
            raise NotFoundError(msg)

        targets = apply_selection([item for item, _score in ranked], selection)
        if not targets:
            logger.info("Update cancelled, no work items selected", extra={"pattern": pattern})
            return BulkUpdateResult(targets=[], payload=payload, dry_run=dry_run)

        return await _run_batch(
            targets=targets, payload=payload, mutator=mutator, dry_run=dry_run, app_settings=app_settings
        )


async def retry_failed(
    *,
    mutator: WorkItemMutator,
    previous: BulkUpdateResult,
    app_settings: Settings | None = None,
) -> BulkUpdateResult:
    """Re-apply a finished live run's payload to the targets that failed.

    Raises:
        ValidationError: If previous was a dry run
    """
    app_settings = app_settings or settings
    if previous.summary is None:
        msg = "Only a live run can be retried"
        raise ValidationError(msg)

    failed_ids = set(previous.summary.failed_target_ids())
    targets = [target for target in previous.targets if target.id in failed_ids]
    logger.info("Retrying %d failed work items", len(targets))

    return await _run_batch(
        targets=targets, payload=previous.payload, mutator=mutator, dry_run=False, app_settings=app_settings
    )
