"""
Pytest configuration for matchbot tests.

Adds the project root to sys.path so that 'from matchbot...' and
'from tests...' imports work. Defines markers and shared fixtures.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from matchbot.core.persistence import PersistenceManager
from matchbot.core.registry import Registry
from matchbot.modules.compat import CompatibilityResolver, MatchupCache
from tests.fakes import FakeDirectory, FakeScoreService


# =============================================================================
# Pytest Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "asyncio: Async tests")
    config.addinivalue_line("markers", "integration: Handler-to-disk scenario tests")
    config.addinivalue_line("markers", "bot: Telegram bot component tests")


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return project root path."""
    return PROJECT_ROOT


@pytest.fixture
def registry_path(tmp_path) -> Path:
    return tmp_path / "registry.json"


@pytest.fixture
def persistence(tmp_path, registry_path) -> PersistenceManager:
    return PersistenceManager(registry_path, tmp_path / "backups")


@pytest.fixture
def registry() -> Registry:
    return Registry()


@pytest.fixture
def score_service() -> FakeScoreService:
    return FakeScoreService()


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def cache(score_service) -> MatchupCache:
    return MatchupCache(score_service)


@pytest.fixture
def resolver(cache, directory) -> CompatibilityResolver:
    return CompatibilityResolver(cache, directory)
