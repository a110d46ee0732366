from __future__ import annotations

from datetime import datetime

import pytest

from tests._fixtures.github import NOW


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation time so date-window assertions are exact."""
    return NOW
