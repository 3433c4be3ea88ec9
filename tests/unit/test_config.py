"""Tests for configuration loading."""

import pytest

from src.core.config import Constants, Settings, get_settings


def test_defaults() -> None:
    """Test defaults match the documented matcher and batch settings."""
    settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.fuzzy_min_score == 60
    assert settings.fuzzy_max_results == 10
    assert settings.bulk_max_concurrency == 1
    assert settings.logfire_token is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test values are read case-insensitively from the environment."""
    monkeypatch.setenv("FUZZY_MIN_SCORE", "75")
    monkeypatch.setenv("bulk_max_concurrency", "4")

    settings = get_settings()

    assert settings.fuzzy_min_score == 75
    assert settings.bulk_max_concurrency == 4


def test_constants() -> None:
    assert Constants.SUBSTRING_FALLBACK_SCORE == 50
    assert Constants.MAX_BULK_CONCURRENCY == 5
