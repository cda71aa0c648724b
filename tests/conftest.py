"""Shared fixtures for crave tests."""

from dataclasses import dataclass

import pytest
import respx

from crave.deck import DeckController
from crave.recipe import Recipe


@dataclass
class ManualTask:
    """Scheduled callback that only runs when the test flushes it."""

    delay: float
    callback: object
    cancelled: bool = False
    ran: bool = False

    def cancel(self) -> bool:
        self.cancelled = True
        return True


class ManualScheduler:
    """Scheduler fake that records deferred callbacks instead of timing them."""

    def __init__(self):
        self.tasks: list[ManualTask] = []

    def __call__(self, delay, callback):
        task = ManualTask(delay=delay, callback=callback)
        self.tasks.append(task)
        return task

    @property
    def pending(self) -> list[ManualTask]:
        return [t for t in self.tasks if not t.cancelled and not t.ran]

    def run_all(self) -> int:
        """Run every pending callback, the way an event loop would; returns count run."""
        count = 0
        for task in self.pending:
            task.ran = True
            task.callback()
            count += 1
        return count

    def run_task(self, task: ManualTask) -> None:
        """Fire a task even if cancelled, as a timer racing its cancellation would."""
        task.ran = True
        task.callback()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def make_recipe():
    def _make(name: str, **kwargs) -> Recipe:
        return Recipe(name=name, **kwargs)

    return _make


@pytest.fixture
def recipes(make_recipe):
    """Five distinct recipes for a deck session."""
    return [
        make_recipe("Shakshuka", origin="Tunisia", prep_time="25 min", difficulty="Easy"),
        make_recipe("Pad Thai", origin="Thailand", prep_time="30 min", difficulty="Medium"),
        make_recipe("Ramen", origin="Japan", prep_time="2 h", difficulty="Hard"),
        make_recipe("Tacos al Pastor", origin="Mexico", prep_time="1 h", difficulty="Medium"),
        make_recipe("Margherita Pizza", origin="Italy", prep_time="45 min", difficulty="Easy"),
    ]


@pytest.fixture
def liked():
    """Stand-in saved collection owner."""
    return []


@pytest.fixture
def deck(scheduler, liked):
    """Deck controller wired to a manual scheduler and a list as saved collection."""
    return DeckController(on_like=liked.append, scheduler=scheduler)


@pytest.fixture
def mock_httpx():
    """Activate respx mock for HTTP requests."""
    with respx.mock(assert_all_called=False) as respx_mock:
        yield respx_mock
