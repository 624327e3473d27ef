"""
PyTest Configuration for microbench Tests

Provides fixtures, markers, and test setup.
"""
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Add tests directory to path for fixtures
tests_path = Path(__file__).parent
sys.path.insert(0, str(tests_path))

from microbench.config import RunConfig, configure  # noqa: E402


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture
def fast_config() -> RunConfig:
    """Short target duration keeping sweeps quick."""
    return RunConfig(target_duration_s=0.01, max_repetitions=100_000)


@pytest.fixture
def reset_default_config():
    """Restore the process-wide default configuration after each test."""
    yield
    configure(reset=True)
