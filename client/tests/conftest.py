"""
Shared test fixtures.

This module provides common test infrastructure used across all test modules.
Test doubles live in tests/helpers.py.
"""

from typing import Callable

import httpx
import pytest

from shared.config import SessionTimings, get_settings
from shared.http import ApiClient, reset_api_client
from modules.auth.service import reset_auth_service
from modules.events.service import reset_events_service

from tests.helpers import (
    FAST_TIMINGS,
    TEST_BASE_URL,
    RecordingNavigator,
    RecordingNotifier,
    RecordingTransport,
)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings, client and service singletons around each test."""
    get_settings.cache_clear()
    reset_api_client()
    reset_auth_service()
    reset_events_service()
    yield
    get_settings.cache_clear()
    reset_api_client()
    reset_auth_service()
    reset_events_service()


@pytest.fixture
def timings() -> SessionTimings:
    return FAST_TIMINGS


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def make_api() -> Callable[[RecordingTransport], ApiClient]:
    """Build ApiClients over a recording transport."""

    def _make(transport: RecordingTransport) -> ApiClient:
        return ApiClient(TEST_BASE_URL, transport=httpx.MockTransport(transport))

    return _make
