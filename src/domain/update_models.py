"""Update payload for work item mutations.

A field that was never assigned means "no change" and is left out of the request body.
Assigning ``[]`` to a list field or ``None`` to a scalar field clears it on the server.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.work_item import Priority


LIST_FIELDS: tuple[str, ...] = ("assignees", "labels")

FIELD_LABELS: dict[str, str] = {
    "name": "Title",
    "description_html": "Description",
    "state": "State",
    "priority": "Priority",
    "assignees": "Assignees",
    "labels": "Labels",
    "start_date": "Start date",
    "target_date": "Target date",
    "estimate_point": "Estimate",
    "module": "Module",
    "cycle": "Cycle",
    "parent": "Parent",
}


def dedupe(values: list[str]) -> list[str]:
    """Drop repeated values, keeping the first occurrence of each."""
    return list(dict.fromkeys(values))


def format_value(value: object) -> str:
    """Render a field value for previews."""
    if value is None or value == []:
        return "(none)"
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    # 3.0 -> "3", 2.5 -> "2.5"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class WorkItemUpdate(BaseModel):
    """Partial update payload sent to the work-tracking API."""

    model_config = ConfigDict(validate_assignment=True, use_enum_values=True)

    name: str | None = Field(default=None, description="New title")
    description_html: str | None = Field(default=None, description="New description (HTML)")
    state: str | None = Field(default=None, description="State ID")
    priority: Priority | None = Field(default=None, description="Priority")
    assignees: list[str] | None = Field(default=None, description="Final assignee member IDs")
    labels: list[str] | None = Field(default=None, description="Final label IDs")
    start_date: str | None = Field(default=None, description="Start date (ISO format)")
    target_date: str | None = Field(default=None, description="Target date (ISO format)")
    estimate_point: float | None = Field(default=None, ge=0, description="Estimate points")
    module: str | None = Field(default=None, description="Module ID")
    cycle: str | None = Field(default=None, description="Cycle ID")
    parent: str | None = Field(default=None, description="Parent work item ID")

    @field_validator("assignees", "labels")
    @classmethod
    def dedupe_list_fields(cls, v: list[str] | None) -> list[str] | None:
        """Keep list fields free of duplicates without disturbing their order."""
        return dedupe(v) if v is not None else None

    def changed_fields(self) -> list[str]:
        """Names of explicitly set fields, in declaration order."""
        return [name for name in type(self).model_fields if name in self.model_fields_set]

    def has_changes(self) -> bool:
        return bool(self.model_fields_set)

    def to_request_body(self) -> dict[str, Any]:
        """Serialize only the explicitly set fields (cleared fields included as empty/null)."""
        return self.model_dump(mode="json", exclude_unset=True)

    def describe_field(self, name: str) -> str:
        """Render the new value of one field, "(cleared)" when it empties the field."""
        value = getattr(self, name)
        if value is None or value == [] or value == "":
            return "(cleared)"
        if name == "description_html":
            return f"[updated - {len(value)} chars]"
        return format_value(value)

    def describe(self) -> list[str]:
        """Human-readable change lines in a stable order."""
        return [f"{FIELD_LABELS[name]}: {self.describe_field(name)}" for name in self.changed_fields()]
