"""Shared fixtures for the calendar occurrences tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from factories import utc


@pytest.fixture
def june_window() -> tuple[datetime, datetime]:
    """The ``[2024-06-01, 2024-06-30)`` window used by most scenarios."""
    return utc(2024, 6, 1), utc(2024, 6, 30)
