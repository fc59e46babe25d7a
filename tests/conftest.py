"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import tempfile
from pathlib import Path

import pytest

from tests.fixtures.fake_adapter import FakeAdapter


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def backup_dir(temp_dir) -> Path:
    """An existing, writable backup directory."""
    path = temp_dir / "backup"
    path.mkdir()
    return path


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    """Acquisition adapter that writes one budget directory and counts teardowns."""
    return FakeAdapter()


@pytest.fixture
def sync_id() -> str:
    """Sample sync ID."""
    return "1cfdbb80-6274-49bf-b0c2-737235a4c81f"


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables."""
    # Ensure tests never pick up a real server
    monkeypatch.setenv("ACTUAL_BACKUP_ENV", "test")
    monkeypatch.setenv("SERVER_URL", "http://actual.test:5006")

    # Mock sensitive environment variables
    monkeypatch.setenv("SERVER_PASSWORD", "test-password")

    monkeypatch.delenv("ACTUAL_TIMEOUT", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "actual: Tests for the Actual sync server client and adapter")
    config.addinivalue_line("markers", "signals: Tests that deliver real process signals")
    config.addinivalue_line("markers", "slow: Tests that take significant time to run")
