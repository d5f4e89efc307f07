from __future__ import annotations

import pytest

from backend.engine.clock import Scheduler


@pytest.fixture
def scheduler() -> Scheduler:
    """A virtual clock starting at 0; tests advance it explicitly."""
    return Scheduler()
