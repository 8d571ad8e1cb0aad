"""
Shared pytest fixtures and configuration for speedracer tests.

This module provides:
- Settings cache reset so env overrides take effect per test
- Logging context cleanup for test isolation
- Small racer factories used across the execution tests
"""

import asyncio
from pathlib import Path
from typing import Any, Callable

import pytest

from speedracer.core.logging import clear_context
from speedracer.core.settings import get_settings


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "slow"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Drop cached RaceSettings before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def isolated_env(monkeypatch, tmp_path: Path):
    """Run from an empty directory with no SPEEDRACER_* variables set."""
    monkeypatch.chdir(tmp_path)
    for key in ("SPEEDRACER_DEFAULT_DEADLINE_SECONDS", "SPEEDRACER_LOG_LEVEL", "SPEEDRACER_JSON_LOGS"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path


# =============================================================================
# Racer factories
# =============================================================================


@pytest.fixture
def lap() -> Callable[..., Callable[[], Any]]:
    """Build a zero-argument racer that sleeps ``delay`` seconds.

    ``fail`` makes the racer raise ``ValueError`` after the delay.
    """

    def _make(delay: float, value: Any = None, fail: bool = False) -> Callable[[], Any]:
        async def _run() -> Any:
            await asyncio.sleep(delay)
            if fail:
                raise ValueError(f"crashed after {delay}s")
            return value

        return _run

    return _make
