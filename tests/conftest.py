"""Shared test doubles."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from beetbell.db.models import ReminderEvent
from beetbell.db.store import MemoryStore
from beetbell.engine.errors import PersistenceError

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=ZoneInfo("UTC"))


class RecordingStore(MemoryStore):
    """MemoryStore that counts writes per key."""

    def __init__(self, data=None):
        super().__init__(data)
        self.writes: list[str] = []

    async def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        await super().set(key, value)


class FailingStore:
    """Store whose every call fails."""

    async def get(self, key: str) -> str | None:
        raise PersistenceError("disk on fire")

    async def set(self, key: str, value: str) -> None:
        raise PersistenceError("disk on fire")


class RecordingTrigger:
    """Collects fire and accelerate notifications."""

    def __init__(self, fail_on: set[str] | None = None):
        self.fired: list[ReminderEvent] = []
        self.accelerated: list[int] = []
        self.fail_on = fail_on or set()

    async def on_fire(self, event: ReminderEvent) -> None:
        self.fired.append(event)
        if event.id in self.fail_on:
            raise RuntimeError(f"speaker broke on {event.id}")

    async def on_accelerate_all(self, count: int) -> None:
        self.accelerated.append(count)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def trigger() -> RecordingTrigger:
    return RecordingTrigger()
