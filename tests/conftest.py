"""Shared pytest fixtures for bookstack-sync tests."""

from unittest.mock import Mock

import pytest

from bookstack_sync.config import Config


@pytest.fixture(autouse=True)
def _clean_bookstack_env(monkeypatch):
    """Keep developer BOOKSTACK_* / LOG_LEVEL settings out of tests."""
    for key in (
        "BOOKSTACK_URL",
        "BOOKSTACK_TOKEN_ID",
        "BOOKSTACK_TOKEN_SECRET",
        "BOOKSTACK_INSECURE",
        "BOOKSTACK_DEBUG",
        "BOOKSTACK_TIMEOUT",
        "BOOKSTACK_SYNC_CONFIG",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(
        server_url="https://wiki.example.com",
        token_id="tokenid",
        token_secret="tokensecret",
    )


@pytest.fixture
def mock_response():
    """Factory fixture for creating requests.Response mocks."""

    def _create_response(status_code=200, json_data=None, text=""):
        response = Mock()
        response.status_code = status_code
        response.text = text
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response

    return _create_response
