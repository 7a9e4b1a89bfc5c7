"""
Pytest configuration and shared fixtures for sumtree tests.

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

import importlib

_common = importlib.import_module("fixtures.common")

make_scheme = _common.make_scheme
make_leaves = _common.make_leaves
make_tree = _common.make_tree


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def scheme():
    """Default SHA-256 / 64-bit commitment scheme."""
    return make_scheme()


@pytest.fixture
def sample_tree(scheme):
    """Four-leaf tree over amounts [5, 3, 7, 1] (no padding)."""
    return make_tree([5, 3, 7, 1], scheme=scheme)


@pytest.fixture
def padded_tree(scheme):
    """Five-leaf tree over [100, 200, 300, 400, 500], padded to eight."""
    return make_tree([100, 200, 300, 400, 500], scheme=scheme)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep SUMTREE_* variables from the developer's shell out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("SUMTREE_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
