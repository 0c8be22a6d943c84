"""
Pytest configuration and shared fixtures for TopicLink tests.

This module provides:
- Rate limiter and metrics reset between tests
- A fake DatabaseManager whose sessions are mocks
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession


@pytest.fixture(autouse=True)
def reset_api_state():
    """Reset in-memory rate limits and request metrics so tests stay independent."""
    from src.api.main import limiter
    from src.monitoring.api_metrics import get_metrics_collector

    limiter.reset()
    get_metrics_collector().clear()
    yield


@pytest.fixture
def mock_session():
    """Create a mock async session."""
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.execute = AsyncMock()
    return session


@pytest.fixture
def fake_db_manager(mock_session):
    """DatabaseManager stand-in whose session() yields `mock_session`."""
    manager = MagicMock()

    @asynccontextmanager
    async def _session():
        yield mock_session

    manager.session = _session
    return manager
