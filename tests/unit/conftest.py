"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Callable, Generator

import pytest

import constants
from configuration import AppConfig, configuration
from models.cache_entry import CacheEntry, CacheSnapshot
from models.requests import CoachingContext


@pytest.fixture(name="config_dict")
def config_dict_fixture() -> dict[str, Any]:
    """Minimal configuration accepted by the service."""
    return {
        "name": "test",
        "service": {
            "host": "localhost",
            "port": 8080,
            "workers": 1,
            "color_log": True,
            "access_log": True,
        },
        "llama_stack": {
            "api_key": "test-key",
            "url": "http://test.com:1234",
            "use_as_library_client": False,
        },
        "inference": {
            "default_model": "test-model",
            "default_provider": "test-provider",
        },
        "documents": {
            "sources": {
                "financial": ["financial-doc"],
                "health": "health-doc",
            },
        },
    }


@pytest.fixture(name="coaching_context")
def coaching_context_fixture() -> CoachingContext:
    """Status of all five pillars."""
    return CoachingContext(
        pillars=[
            {"name": "Financial", "value": 40, "goal": 80},
            {"name": "Health", "value": 70, "goal": 90},
            {"name": "Relationships", "value": 65, "goal": 85},
            {"name": "Growth", "value": 55, "goal": 80},
            {"name": "Purpose", "value": 50, "goal": 75},
        ],
        overallScore=56,
        lowestPillar="Financial",
    )


@pytest.fixture(name="make_snapshot")
def make_snapshot_fixture() -> Callable[..., CacheSnapshot]:
    """Factory creating snapshots from raw (and optionally condensed) texts."""

    def _make_snapshot(
        raw: dict[str, str], condensed: dict[str, str] | None = None
    ) -> CacheSnapshot:
        condensed = condensed or {}
        return CacheSnapshot(
            entries={
                category: CacheEntry(
                    category=category,
                    raw_text=raw.get(category, ""),
                    condensed_text=condensed.get(category, ""),
                    document_count=1 if raw.get(category) else 0,
                )
                for category in constants.CATEGORIES
            },
            refreshed_at=datetime.now(UTC),
        )

    return _make_snapshot


@pytest.fixture(name="loaded_configuration")
def loaded_configuration_fixture(
    config_dict: dict[str, Any],
) -> Generator[AppConfig, None, None]:
    """Initialize the global configuration, reset it afterwards."""
    configuration.init_from_dict(config_dict)
    yield configuration
    configuration._configuration = None  # pylint: disable=protected-access
    configuration._document_cache = None  # pylint: disable=protected-access
