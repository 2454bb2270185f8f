"""
Shared pytest fixtures for EventPix tests.
"""
import os
from unittest.mock import MagicMock, patch

import pytest

from tests.fakes import FakeChatTransport, InMemoryIdentityStore


@pytest.fixture
def mock_env():
    """Fixture to set common test environment variables."""
    env_vars = {
        "MONGO_URI": "mongodb://localhost:27017",
        "MONGO_DB_NAME": "test_eventpix_db",
        "MESSAGING_ENABLED": "false",
        "LOCAL_TIMEZONE": "UTC",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def mock_settings():
    """Fixture to mock get_settings for tests. Patches all modules that use it."""
    mock = MagicMock()
    mock.mongo_uri = "mongodb://localhost:27017"
    mock.mongo_database_name = "test_db"
    mock.local_timezone = "UTC"
    mock.embedding_dimension = 4
    mock.association_threshold = 0.6
    mock.propagation_threshold = 0.75
    mock.search_threshold = 0.6
    mock.search_result_limit = 50
    mock.transaction_max_retries = 2

    # Patch at source and at use sites (modules import get_settings at load time)
    with patch("eventpix.core.config.get_settings", return_value=mock), patch(
        "eventpix.utils.datetime_utils.get_settings", return_value=mock
    ):
        yield mock


@pytest.fixture
def store() -> InMemoryIdentityStore:
    return InMemoryIdentityStore()


@pytest.fixture
def chat_transport() -> FakeChatTransport:
    return FakeChatTransport()


