"""Pytest configuration and shared fixtures."""

from datetime import datetime

import logfire
import pytest

from signal2noise.core.clock import FixedClock
from signal2noise.core.state_store import StateStore
from signal2noise.core.storage import InMemoryBlobStorage
from signal2noise.services.workflow_service import Screen, TaskWorkflow


@pytest.fixture(scope="session", autouse=True)
def _local_logfire() -> None:
    """Keep spans local during tests."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def fixed_clock() -> FixedClock:
    """A clock pinned to a Monday morning."""
    return FixedClock(datetime(2024, 3, 4, 9, 0, 0))


@pytest.fixture
def memory_storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture
def store(memory_storage: InMemoryBlobStorage) -> StateStore:
    """A fresh store backed by in-memory storage."""
    return StateStore(memory_storage)


@pytest.fixture
def screens() -> list[Screen]:
    """Records every screen the workflow asks to show."""
    return []


@pytest.fixture
def workflow(store: StateStore, fixed_clock: FixedClock, screens: list[Screen]) -> TaskWorkflow:
    return TaskWorkflow(store, clock=fixed_clock, navigator=screens.append)
