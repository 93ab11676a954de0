"""JSON encoding of the persisted settings and ledger records.

Settings record::

    {"reminderDelayHours": 10, "cooldownMinutes": 30}

Ledger record (creation order)::

    [{"id": "beet-1767225600000", "reportTime": 1767225600000,
      "fireTime": 1767261600000, "remaining": 36000000, "delayHoursUsed": 10}]

Times are integer epoch milliseconds. Field names are part of the on-disk
format and must not change.
"""

import json
import logging
import math
from typing import Any, List, Tuple

from beetbell.db.models import ReminderEvent, Settings
from beetbell.engine.errors import MalformedRecord
from beetbell.utils.constants import MAX_COOLDOWN_MINUTES, MAX_REMINDER_HOURS
from beetbell.utils.time_utils import from_epoch_ms, to_epoch_ms, to_ms

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _as_epoch_ms(entry: dict, name: str) -> int:
    value = entry.get(name)
    if not _is_number(value) or value != int(value):
        raise MalformedRecord(f"{name} is not an integer: {value!r}")
    return int(value)


# Settings


def encode_settings(settings: Settings) -> str:
    return json.dumps(
        {
            "reminderDelayHours": settings.reminder_hours,
            "cooldownMinutes": settings.cooldown_minutes,
        }
    )


def decode_settings(text: str, defaults: Settings) -> Settings:
    """Decode a settings record.

    Each field falls back to its default on its own when absent or invalid.
    Raises MalformedRecord only when the text is not a JSON object.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedRecord(f"Settings record is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedRecord(f"Settings record is not an object: {type(data).__name__}")

    reminder_hours = defaults.reminder_hours
    hours = data.get("reminderDelayHours")
    if _is_number(hours) and 0 < hours <= MAX_REMINDER_HOURS:
        reminder_hours = float(hours)
    elif hours is not None:
        logger.warning(f"Ignoring invalid reminderDelayHours: {hours!r}")

    cooldown_minutes = defaults.cooldown_minutes
    mins = data.get("cooldownMinutes")
    if _is_number(mins) and 0 <= mins <= MAX_COOLDOWN_MINUTES:
        cooldown_minutes = float(mins)
    elif mins is not None:
        logger.warning(f"Ignoring invalid cooldownMinutes: {mins!r}")

    return Settings(reminder_hours=reminder_hours, cooldown_minutes=cooldown_minutes)


# Ledger


def encode_event(event: ReminderEvent) -> dict:
    return {
        "id": event.id,
        "reportTime": to_epoch_ms(event.report_time),
        "fireTime": to_epoch_ms(event.fire_time),
        "remaining": to_ms(event.remaining),
        "delayHoursUsed": event.delay_hours_used,
    }


def decode_event(entry: Any) -> ReminderEvent:
    """Decode one ledger entry, raising MalformedRecord if it is unusable."""
    if not isinstance(entry, dict):
        raise MalformedRecord(f"Ledger entry is not an object: {entry!r}")

    event_id = entry.get("id")
    if not isinstance(event_id, str) or not event_id:
        raise MalformedRecord(f"Ledger entry has no id: {entry!r}")

    report_ms = _as_epoch_ms(entry, "reportTime")
    fire_ms = _as_epoch_ms(entry, "fireTime")
    if fire_ms <= report_ms:
        raise MalformedRecord(f"Ledger entry {event_id} fires before it was reported")

    delay_hours = entry.get("delayHoursUsed")
    if not _is_number(delay_hours) or delay_hours <= 0:
        # Older or hand-edited records: recover the delay from the two instants
        delay_hours = (fire_ms - report_ms) / 3_600_000

    try:
        report_time = from_epoch_ms(report_ms)
        fire_time = from_epoch_ms(fire_ms)
    except (OverflowError, ValueError) as e:
        raise MalformedRecord(f"Ledger entry {event_id} has an out-of-range time: {e}") from e

    return ReminderEvent(
        id=event_id,
        report_time=report_time,
        fire_time=fire_time,
        delay_hours_used=float(delay_hours),
    )


def encode_events(events: List[ReminderEvent]) -> str:
    return json.dumps([encode_event(event) for event in events])


def decode_events(text: str) -> Tuple[List[ReminderEvent], int]:
    """Decode a ledger record.

    Returns the decodable events and the number of entries dropped.
    Raises MalformedRecord only when the record as a whole is unusable.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedRecord(f"Ledger record is not JSON: {e}") from e

    if not isinstance(data, list):
        raise MalformedRecord(f"Ledger record is not a list: {type(data).__name__}")

    events: List[ReminderEvent] = []
    seen_ids: set[str] = set()
    dropped = 0

    for entry in data:
        try:
            event = decode_event(entry)
        except MalformedRecord as e:
            logger.warning(f"Dropping malformed ledger entry: {e}")
            dropped += 1
            continue

        if event.id in seen_ids:
            logger.warning(f"Dropping duplicate ledger entry {event.id}")
            dropped += 1
            continue

        seen_ids.add(event.id)
        events.append(event)

    return events, dropped
