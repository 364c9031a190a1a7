"""
Pytest configuration and shared fixtures for escrow core tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_host = _common.make_host
make_registry = _common.make_registry
make_token = _common.make_token


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def host():
    """Provide a HostLedger with a deterministic clock."""
    return make_host()


@pytest.fixture
def registry(host):
    """Provide a CompetitionRegistry with the reentrancy guard on."""
    return make_registry(host)


@pytest.fixture
def unguarded_registry(host):
    """Provide a CompetitionRegistry relying on effect ordering alone."""
    return make_registry(host, reentrancy_guard=False)


@pytest.fixture
def token(host):
    """Provide an InMemoryToken registered with the host."""
    return make_token(host)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep PRIZEPOOL_* variables from the developer's shell out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("PRIZEPOOL_"):
            monkeypatch.delenv(key, raising=False)
    from core.config.runtime import set_default_config
    set_default_config(None)
    yield
    set_default_config(None)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_conserved():
    """Helper to assert pool accounting for one competition."""
    def _assert(registry, competition_id: int):
        c = registry.get_competition(competition_id)
        assert c.pooled_balance >= 0
        assert c.pooled_balance == c.total_deposited - c.total_paid_out
        assert c.total_paid_out <= c.total_deposited
        return c
    return _assert
