"""Test configuration and fixtures."""

from datetime import datetime

import pytest

from tests.factories import NOW


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for relative labels."""
    return NOW
