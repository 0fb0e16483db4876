"""
Shared pytest fixtures and configuration for tagorm tests.

This module provides:
- Sample model classes (see ``tests/_support/models.py``)
- An ``AsyncMock`` executor standing in for the asyncpg pool
- Settings cache isolation
"""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

# Ensure tagorm and the tests package are importable
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

from tagorm.dialect import PostgreSQLDialect  # noqa: E402
from tagorm.settings import clear_settings_cache  # noqa: E402


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "asyncio"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch):
    """Drop cached settings and TAGORM_* variables around every test."""
    for key in list(os.environ):
        if key.startswith("TAGORM_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def pg():
    return PostgreSQLDialect()


@pytest.fixture
def executor():
    """Executor double: execute/fetch/fetchrow are AsyncMocks."""
    mock = MagicMock()
    mock.execute = AsyncMock(return_value="OK")
    mock.fetch = AsyncMock(return_value=[])
    mock.fetchrow = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def mock_pool():
    """asyncpg pool double whose ``acquire()`` yields ``mock_pool.conn``."""
    pool = MagicMock()
    conn = AsyncMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=conn)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    pool.conn = conn
    return pool


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any ``configure_logging`` call made by a test."""
    yield
    structlog.reset_defaults()
