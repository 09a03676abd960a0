"""Shared fixtures for the web test suite."""

from unittest.mock import MagicMock

import pytest

from web.app import create_app
from web.config import DEFAULT_ADMIN_PASSWORD


@pytest.fixture
def app(data_access):
    """Flask app over a temporary local store (remote disconnected)."""
    return create_app(data_access=data_access, testing=True)


@pytest.fixture
def client(app):
    """Create Flask test client."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    """Test client with an admin session."""
    response = client.post("/admin/login", json={"password": DEFAULT_ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def llm_log_dir(tmp_path, monkeypatch):
    """Send LLM interaction logs to a temporary directory."""
    log_dir = tmp_path / "logs"
    monkeypatch.setattr("web.logging_utils.LOG_DIR", log_dir)
    return log_dir


@pytest.fixture
def mock_openai_client():
    """Create a mock OpenAI client for testing without API calls."""
    return MagicMock()
