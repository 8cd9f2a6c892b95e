"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest

from jsonsink.config import RequestMethod, ReporterState


@pytest.fixture
def state():
    """Return a resolved reporter state."""
    return ReporterState(
        sink_url="http://sink.example:8000/metrics",
        request_method=RequestMethod.PUT,
        hostname="h1",
    )


@pytest.fixture
def post_state():
    """Return a reporter state using POST with extra headers."""
    return ReporterState(
        sink_url="http://sink.example:8000/metrics",
        request_method=RequestMethod.POST,
        hostname="h1",
        headers={"X-Api-Key": "secret"},
    )


@pytest.fixture
def mock_logger():
    """Return a mock logger for injection."""
    return MagicMock()
