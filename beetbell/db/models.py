"""Data models."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from beetbell.utils.constants import DEFAULT_COOLDOWN_MINUTES, DEFAULT_REMINDER_HOURS


@dataclass(frozen=True)
class Settings:
    """Tunable parameters. Replaced wholesale, never mutated."""

    reminder_hours: float = DEFAULT_REMINDER_HOURS
    cooldown_minutes: float = DEFAULT_COOLDOWN_MINUTES

    @property
    def reminder_delay(self) -> timedelta:
        return timedelta(hours=self.reminder_hours)

    @property
    def cooldown(self) -> timedelta:
        return timedelta(minutes=self.cooldown_minutes)


@dataclass
class ReminderEvent:
    """A scheduled reminder."""

    id: str
    report_time: datetime  # UTC
    fire_time: datetime  # UTC, report_time + delay in effect at creation
    delay_hours_used: float
    remaining: timedelta = timedelta(0)  # derived, refreshed every tick
    accelerated: bool = False  # forced expiry, never persisted

    def remaining_at(self, now: datetime) -> timedelta:
        """Time left until fire, clamped at zero."""
        return max(timedelta(0), self.fire_time - now)

    def is_expired(self, now: datetime) -> bool:
        return self.accelerated or self.remaining_at(now) == timedelta(0)


@dataclass
class TickResult:
    """Outcome of one ledger tick."""

    updated: list[ReminderEvent] = field(default_factory=list)
    just_expired: list[ReminderEvent] = field(default_factory=list)
