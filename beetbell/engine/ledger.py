"""Event ledger - the ordered set of live reminders and its persistence."""

import logging
from datetime import datetime, timedelta
from typing import List

from beetbell.db.codec import decode_events, encode_events
from beetbell.db.models import ReminderEvent, TickResult
from beetbell.db.store import KeyValueStore
from beetbell.engine.errors import MalformedRecord, PersistenceError
from beetbell.utils.constants import EVENT_ID_PREFIX, EVENTS_KEY
from beetbell.utils.time_utils import to_epoch_ms

logger = logging.getLogger(__name__)


class EventLedger:
    """Owns every live ReminderEvent, in creation order.

    Every mutation is written through to the store. Store failures are
    logged and the ledger carries on in memory.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._events: List[ReminderEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> List[ReminderEvent]:
        """Live events in creation order (a copy)."""
        return list(self._events)

    def newest(self) -> ReminderEvent | None:
        """The most recently reported live event."""
        if not self._events:
            return None
        return max(self._events, key=lambda e: e.report_time)

    def next_id(self, now: datetime) -> str:
        """Allocate an id unique within the ledger."""
        base = f"{EVENT_ID_PREFIX}-{to_epoch_ms(now)}"
        taken = {event.id for event in self._events}
        if base not in taken:
            return base

        n = 1
        while f"{base}-{n}" in taken:
            n += 1
        return f"{base}-{n}"

    async def restore(self, now: datetime) -> List[ReminderEvent]:
        """Load persisted events and keep the ones that have not fired yet.

        Events whose fire time passed while the process was down are dropped
        without a fire notification.
        """
        self._events = []

        try:
            text = await self.store.get(EVENTS_KEY)
        except PersistenceError as e:
            logger.error(f"Error loading saved events: {e}")
            return []

        if text is None:
            return []

        try:
            events, dropped = decode_events(text)
        except MalformedRecord as e:
            logger.error(f"Error loading saved events: {e}")
            return []

        survivors = [event for event in events if event.fire_time > now]
        for event in survivors:
            event.remaining = event.remaining_at(now)

        expired = len(events) - len(survivors)
        if expired:
            logger.info(f"Restore: dropped {expired} reminders that expired while offline")
        if dropped:
            logger.warning(f"Restore: skipped {dropped} malformed entries")

        self._events = survivors
        logger.info(f"Restored {len(survivors)} active reminders")
        return self.events

    async def append(self, event: ReminderEvent) -> None:
        """Add a new event and persist the full set."""
        self._events.append(event)
        await self._persist()

    async def tick(self, now: datetime) -> TickResult:
        """Advance every event to ``now`` and remove the expired ones.

        An expired event is returned in ``just_expired`` by exactly one tick,
        because that tick also removes it. The set is persisted only when it
        changed.
        """
        if not self._events:
            return TickResult()

        live: List[ReminderEvent] = []
        expired: List[ReminderEvent] = []

        for event in self._events:
            if event.is_expired(now):
                event.remaining = timedelta(0)
                expired.append(event)
            else:
                event.remaining = event.remaining_at(now)
                live.append(event)

        self._events = live

        if expired:
            logger.debug(f"Tick: {len(expired)} expired, {len(live)} still live")
            await self._persist()

        return TickResult(updated=list(live), just_expired=expired)

    async def accelerate_all(self) -> int:
        """Force every live event to expire on the next tick.

        Accelerated events are left out of the persisted record, so a
        restart before the next tick does not bring them back.
        """
        for event in self._events:
            event.accelerated = True
            event.remaining = timedelta(0)

        await self._persist()
        return len(self._events)

    async def clear_all(self) -> None:
        """Drop every event without firing and persist the empty set."""
        self._events = []
        await self._persist()

    async def _persist(self) -> None:
        pending = [event for event in self._events if not event.accelerated]
        try:
            await self.store.set(EVENTS_KEY, encode_events(pending))
        except PersistenceError as e:
            logger.error(f"Error saving events: {e}")
