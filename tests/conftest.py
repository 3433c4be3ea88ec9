"""Pytest configuration and shared fixtures."""

import logging

import logfire
import pytest

from src.core.config import Settings


logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_test_logfire():
    """Keep Logfire local during tests."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        fuzzy_min_score=60,
        fuzzy_max_results=10,
        bulk_max_concurrency=1,
        logfire_token=None,
    )
