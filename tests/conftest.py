"""Pytest configuration and fixtures for truenas-updater tests."""

import logging
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from truenas_updater.config import UpdateConfig


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for all loggers during tests.

    This allows pytest's caplog fixture to capture logs from all loggers.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("truenas_updater"):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logger = logging.getLogger(name)
        logger.propagate = propagate_value


@pytest.fixture
def make_config() -> Callable[..., UpdateConfig]:
    """Build an UpdateConfig with test defaults and keyword overrides."""

    def _make(**overrides: Any) -> UpdateConfig:
        values: dict[str, Any] = {
            "host": "truenas.local",
            "api_key": "test-key",
            "plex_token": "plex-token",
        }
        values.update(overrides)
        return UpdateConfig(**values)

    return _make


@pytest.fixture
def mock_session() -> MagicMock:
    """Provide a mock aiohttp.ClientSession."""
    return MagicMock()


@pytest.fixture
def app_payloads() -> list[dict[str, Any]]:
    """Representative ``GET app`` listing."""
    return [
        {
            "id": "nextcloud",
            "name": "nextcloud",
            "state": "RUNNING",
            "upgrade_available": True,
        },
        {
            "id": "plex",
            "name": "plex",
            "state": "RUNNING",
            "upgrade_available": True,
        },
        {
            "id": "jellyfin",
            "name": "jellyfin",
            "state": "STOPPED",
            "upgrade_available": False,
        },
        {"id": "immich", "name": "immich", "state": "DEPLOYING"},
    ]
