"""Reminder engine - report action, tick processing and fire side effects."""

import logging
from datetime import datetime, timedelta
from typing import Protocol

from beetbell.db.models import ReminderEvent, Settings, TickResult
from beetbell.db.store import KeyValueStore
from beetbell.engine.debounce import can_accept, remaining_cooldown, restored_report_time
from beetbell.engine.errors import Debounced
from beetbell.engine.ledger import EventLedger
from beetbell.engine.settings_store import SettingsStore
from beetbell.utils.time_utils import truncate_ms, utc_now

logger = logging.getLogger(__name__)


class ReminderTrigger(Protocol):
    """Outward effects of a reminder (message, sound, notification)."""

    async def on_fire(self, event: ReminderEvent) -> None: ...

    async def on_accelerate_all(self, count: int) -> None: ...


class ReminderEngine:
    """Mutable reminder state: settings, ledger and debounce.

    All entry points take an optional ``now`` so the state machine can be
    driven without a live clock. Everything runs on one event loop, so
    report and tick never interleave inside a call.
    """

    def __init__(
        self,
        store: KeyValueStore,
        trigger: ReminderTrigger | None = None,
        default_settings: Settings | None = None,
    ):
        self.settings_store = SettingsStore(store, default_settings)
        self.ledger = EventLedger(store)
        self.trigger = trigger
        self.last_accepted_report_time: datetime | None = None
        self.alert_active = False
        self._started = False

    @property
    def settings(self) -> Settings:
        return self.settings_store.current

    @property
    def started(self) -> bool:
        return self._started

    def _require_started(self) -> None:
        if not self._started:
            raise RuntimeError("Reminder engine is not running")

    # Lifecycle

    async def init(self, now: datetime | None = None) -> None:
        """Load settings, restore the ledger and derive the debounce state."""
        now = truncate_ms(now or utc_now())

        settings = await self.settings_store.load()
        await self.ledger.restore(now)

        newest = self.ledger.newest()
        self.last_accepted_report_time = restored_report_time(
            now, settings, newest.report_time if newest else None
        )
        self.alert_active = False
        self._started = True

        logger.info(
            f"Reminder engine started with {len(self.ledger)} active reminders"
            + (" (cooldown pending)" if self.last_accepted_report_time else "")
        )

    async def shutdown(self) -> None:
        """Stop accepting work. The tick job must already be unregistered."""
        if not self._started:
            return
        self._started = False
        logger.info("Reminder engine stopped")

    # Debounce gate

    def can_report(self, now: datetime | None = None) -> bool:
        now = now or utc_now()
        return can_accept(now, self.settings, self.last_accepted_report_time)

    def remaining_cooldown(self, now: datetime | None = None) -> timedelta:
        now = now or utc_now()
        return remaining_cooldown(now, self.settings, self.last_accepted_report_time)

    def _refresh_debounce(self, now: datetime) -> None:
        if self.last_accepted_report_time is None:
            return
        if can_accept(now, self.settings, self.last_accepted_report_time):
            logger.debug("Cooldown elapsed")
            self.last_accepted_report_time = None

    # User actions

    async def report_event(self, now: datetime | None = None) -> ReminderEvent:
        """Schedule a reminder for a report made at ``now``.

        Raises:
            Debounced: if the cooldown window is still open. Nothing changes.
        """
        self._require_started()
        now = truncate_ms(now or utc_now())

        if not can_accept(now, self.settings, self.last_accepted_report_time):
            raise Debounced(self.remaining_cooldown(now))

        settings = self.settings
        event = ReminderEvent(
            id=self.ledger.next_id(now),
            report_time=now,
            fire_time=now + settings.reminder_delay,
            delay_hours_used=settings.reminder_hours,
            remaining=settings.reminder_delay,
        )

        await self.ledger.append(event)
        self.last_accepted_report_time = now

        logger.info(f"Scheduled {event.id} to fire at {event.fire_time.isoformat()}")
        return event

    async def accelerate_all(self) -> int:
        """Expire every live reminder on the next tick and reopen the gate."""
        self._require_started()

        count = await self.ledger.accelerate_all()
        self.last_accepted_report_time = None
        logger.info(f"Accelerating {count} reminders")

        if self.trigger:
            try:
                await self.trigger.on_accelerate_all(count)
            except Exception as e:
                logger.error(f"Accelerate trigger failed: {e}")

        return count

    async def clear_all(self) -> None:
        """Forget every reminder without firing."""
        self._require_started()
        await self.ledger.clear_all()
        self.last_accepted_report_time = None
        logger.info("Cleared all reminders")

    async def save_settings(self, reminder_hours_text: str, cooldown_minutes_text: str) -> Settings:
        """Replace the settings. Already scheduled reminders keep their fire time."""
        return await self.settings_store.save(reminder_hours_text, cooldown_minutes_text)

    def dismiss_alert(self) -> None:
        self.alert_active = False

    # Tick

    async def tick(self, now: datetime | None = None) -> TickResult:
        """One scheduler pass: expire, fire once per expiry, refresh the gate."""
        self._require_started()
        now = truncate_ms(now or utc_now())

        result = await self.ledger.tick(now)

        for event in result.just_expired:
            await self._fire(event)

        self._refresh_debounce(now)
        return result

    async def _fire(self, event: ReminderEvent) -> None:
        self.alert_active = True
        logger.info(f"Reminder {event.id} fired")

        if self.trigger is None:
            return

        try:
            await self.trigger.on_fire(event)
        except Exception as e:
            logger.error(f"Fire trigger failed for {event.id}: {e}")
