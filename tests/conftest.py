"""Shared pytest fixtures for apierrors test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def fresh_error_settings() -> Generator[None, None, None]:
    """Reload error settings from the environment for every test."""
    from apierrors.core.config import get_error_settings

    get_error_settings.cache_clear()
    yield
    get_error_settings.cache_clear()
