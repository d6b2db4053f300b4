"""
Pytest configuration and fixtures for durable_ai tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from durable_ai.durability import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from durable_ai.durability import InMemoryJournalHost, reset_host, set_host  # noqa: E402
from durable_ai.observability import reset_logging  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_globals():
    """Every test starts with no process-wide host and logging unlatched."""
    reset_host()
    reset_logging()
    yield
    reset_host()
    reset_logging()


@pytest.fixture
def host():
    """Fresh in-memory journal installed as the process-wide host."""
    journal = InMemoryJournalHost()
    set_host(journal)
    return journal


@pytest.fixture
def clean_env(monkeypatch):
    """Remove provider env vars that would leak into config resolution."""
    for key in ("X_API_KEY", "X_ENDPOINT", "OPENAI_API_KEY", "OPENAI_ENDPOINT", "NEO_HOST"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
