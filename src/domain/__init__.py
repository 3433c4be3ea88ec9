"""Domain models and DTOs."""

from src.domain.update_models import WorkItemUpdate
from src.domain.work_item import Candidate, Priority, WorkItem, WorkItemMutator, WorkItemSource


__all__ = [
    "Candidate",
    "Priority",
    "WorkItem",
    "WorkItemMutator",
    "WorkItemSource",
    "WorkItemUpdate",
]
