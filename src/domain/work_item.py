"""Work item domain models, enums and collaborator protocols."""

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ConfigDict, Field


if TYPE_CHECKING:
    from src.domain.update_models import WorkItemUpdate


class Priority(StrEnum):
    """Work item priority."""

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class WorkItem(BaseModel):
    """Work item snapshot as returned by the work-tracking API."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique work item ID")
    name: str = Field(..., description="Work item title")
    sequence_id: int = Field(default=0, description="Project-scoped sequence number")
    state: str | None = Field(default=None, description="State ID")
    priority: str | None = Field(default=None, description="Priority name")
    assignees: list[str] = Field(default_factory=list, description="Assignee member IDs")
    labels: list[str] = Field(default_factory=list, description="Label IDs")
    module: str | None = Field(default=None, description="Module ID")
    cycle: str | None = Field(default=None, description="Cycle ID")
    parent: str | None = Field(default=None, description="Parent work item ID")
    start_date: str | None = Field(default=None, description="Start date (ISO format)")
    target_date: str | None = Field(default=None, description="Target date (ISO format)")
    estimate_point: float | None = Field(default=None, description="Estimate points")


class Candidate(BaseModel):
    """Searchable record taken at search time: opaque ID plus title."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str

    @classmethod
    def from_work_item(cls, item: WorkItem) -> "Candidate":
        return cls(id=item.id, title=item.name)


class WorkItemSource(Protocol):
    """Supplies the full candidate list for a project (already fetched, single page)."""

    async def list_work_items(self, project_id: str) -> list[WorkItem]: ...


class WorkItemMutator(Protocol):
    """Applies an update payload to one work item by ID."""

    async def update_work_item(self, work_item_id: str, payload: "WorkItemUpdate") -> WorkItem: ...
