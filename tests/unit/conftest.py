"""Pytest configuration and fixtures for unit tests."""

import pytest

from src.domain.work_item import WorkItem
from tests.unit.mocks import InMemoryWorkItemStore


API_TITLES = [
    "API integration module",
    "Update API documentation",
    "Fix API authentication bug",
    "Dashboard analytics widget",
]


@pytest.fixture
def work_items() -> list[WorkItem]:
    """Four work items with diverging assignees and labels."""
    return [
        WorkItem(id="wi-1", name=API_TITLES[0], sequence_id=1, assignees=["u1"], labels=["L1"], state="backlog"),
        WorkItem(id="wi-2", name=API_TITLES[1], sequence_id=2, assignees=["u2", "u1"], labels=[], state="todo"),
        WorkItem(id="wi-3", name=API_TITLES[2], sequence_id=3, assignees=[], labels=["L3"], state="todo"),
        WorkItem(id="wi-4", name=API_TITLES[3], sequence_id=4, assignees=["u4"], labels=["L1"], state="done"),
    ]


@pytest.fixture
def store(work_items) -> InMemoryWorkItemStore:
    """Provides a fresh in-memory store holding work_items under project proj-1."""
    return InMemoryWorkItemStore(work_items)
