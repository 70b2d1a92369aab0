import pytest

from session import Scheduler


class ManualClock:
    """Clock that only moves when a test advances it."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock)


@pytest.fixture
def advance(clock, scheduler):
    """Move the clock forward one second at a time, firing due tasks."""
    def _advance(seconds=1):
        for _ in range(seconds):
            clock.now += 1.0
            scheduler.run_pending()
    return _advance


@pytest.fixture
def events():
    return []
