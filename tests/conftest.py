"""
Pytest configuration and shared fixtures.

This conftest.py:
1. Adds project root and tests root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers
"""

import hashlib
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

from fixtures import TaggingHasher, make_tree  # noqa: E402
from ordmerkle import HashAdapter  # noqa: E402


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def sha256_adapter():
    """SHA-256 hash adapter."""
    return HashAdapter(hashlib.sha256)


@pytest.fixture
def tagging_adapter():
    """Degenerate adapter whose output embeds its input."""
    return HashAdapter(TaggingHasher, name="tagging")


@pytest.fixture
def seven_tree():
    """Tree over the integers 0..6, inserted one at a time."""
    return make_tree(range(7), bulk=False)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep ORDMERKLE_* variables from the developer's shell out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("ORDMERKLE_"):
            monkeypatch.delenv(key, raising=False)

    from ordmerkle.config import set_default_config
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
