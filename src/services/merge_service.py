"""Merging of list-valued fields (assignees, labels) for bulk updates."""

import logging
from collections.abc import Iterable, Mapping
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from src.core.errors import ValidationError
from src.domain.update_models import LIST_FIELDS, WorkItemUpdate, dedupe


logger = logging.getLogger(__name__)


class MergeMode(StrEnum):
    """How an incoming list combines with a target's current list."""

    ADD = "add"
    REPLACE = "replace"
    CLEAR = "clear"


def parse_mode(mode: MergeMode | str) -> MergeMode:
    """Coerce a mode name into a MergeMode.

    Raises:
        ValidationError: If the mode is not add, replace or clear
    """
    try:
        return MergeMode(str(mode).lower())
    except ValueError as e:
        msg = f"Invalid merge mode '{mode}', must be one of: {', '.join(MergeMode)}"
        raise ValidationError(msg) from e


def merge(mode: MergeMode | str, incoming: Iterable[str], existing: Iterable[str]) -> list[str]:
    """Combine incoming values with existing ones according to mode.

    ADD keeps existing values first, then appends new incoming values.
    REPLACE returns incoming alone. CLEAR always returns [].
    Duplicates are dropped, first occurrence wins.
    """
    mode = parse_mode(mode)
    if mode == MergeMode.CLEAR:
        return []
    if mode == MergeMode.REPLACE:
        return dedupe(list(incoming))
    return dedupe([*existing, *incoming])


def union_existing(values_per_target: Iterable[Iterable[str]]) -> list[str]:
    """Union of every target's current values, in target order."""
    return dedupe([value for values in values_per_target for value in values])


class MergeRequest(BaseModel):
    """One list-field change for a whole batch of targets."""

    mode: MergeMode
    incoming: list[str] = Field(default_factory=list)
    existing_per_target: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, v: MergeMode | str) -> MergeMode:
        return parse_mode(v)

    @classmethod
    def for_targets(
        cls,
        *,
        mode: MergeMode | str,
        incoming: Iterable[str],
        existing_per_target: Mapping[str, Iterable[str]],
    ) -> "MergeRequest":
        return cls(
            mode=mode,
            incoming=list(incoming),
            existing_per_target={target_id: list(values) for target_id, values in existing_per_target.items()},
        )

    def resolve(self) -> list[str]:
        """Final list applied identically to every target in the batch.

        ADD merges against the union of all targets' current values; no per-target merge is done.
        """
        existing = union_existing(self.existing_per_target.values()) if self.mode == MergeMode.ADD else []
        return merge(self.mode, self.incoming, existing)

    def apply_to(self, payload: WorkItemUpdate, field: str) -> WorkItemUpdate:
        """Write the resolved list into payload as an explicit value (CLEAR writes [])."""
        if field not in LIST_FIELDS:
            msg = f"Field '{field}' is not a list field, must be one of: {', '.join(LIST_FIELDS)}"
            raise ValidationError(msg)

        final = self.resolve()
        setattr(payload, field, final)
        logger.debug(
            "Resolved list field for batch",
            extra={"field": field, "mode": self.mode.value, "targets": len(self.existing_per_target), "final": final},
        )
        return payload
