"""Pytest configuration and shared fixtures."""

from dataclasses import dataclass
from pathlib import Path

import pytest

from hookaudit.core.cache import AuditCache
from hookaudit.core.context import Context
from hookaudit.core.parser import ShellScriptParser
from hookaudit.core.validator import clear_caches
from hookaudit.integrations import config as config_module


@pytest.fixture
def project_root():
    """Path to project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def data_dir():
    """Path to tests/data/ with the install hook regression fixtures."""
    return Path(__file__).parent / "data"


@pytest.fixture
def parser():
    """ShellScriptParser instance for testing."""
    return ShellScriptParser()


@pytest.fixture
def context():
    """Fresh Context with the default trust catalog."""
    return Context()


@pytest.fixture
def cache():
    """AuditCache instance with reasonable defaults."""
    return AuditCache(max_size=10)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the real user config and shared audit cache."""
    monkeypatch.delenv(config_module.CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr(config_module, "user_config_path", lambda: tmp_path / "user-config" / "config.yaml")
    clear_caches()
    yield
    clear_caches()


@dataclass
class MockResult:
    """Mock audit result for cache testing."""

    value: str


@pytest.fixture
def mock_result():
    """Factory fixture for creating MockResult instances."""

    def _create(value="test"):
        return MockResult(value)

    return _create

