"""Debounce gate - decides whether a new report is allowed.

Pure functions over the settings and the last accepted report time; the
engine owns the only copy of that time.
"""

from datetime import datetime, timedelta

from beetbell.db.models import Settings


def can_accept(
    now: datetime, settings: Settings, last_accepted_report_time: datetime | None
) -> bool:
    """True if a report at ``now`` is outside the cooldown window."""
    if last_accepted_report_time is None:
        return True
    if settings.cooldown_minutes == 0:
        return True
    return now - last_accepted_report_time >= settings.cooldown


def remaining_cooldown(
    now: datetime, settings: Settings, last_accepted_report_time: datetime | None
) -> timedelta:
    """Time until the gate opens, zero if it is already open."""
    if can_accept(now, settings, last_accepted_report_time):
        return timedelta(0)
    elapsed = now - last_accepted_report_time  # type: ignore[operator]
    return max(timedelta(0), settings.cooldown - elapsed)


def restored_report_time(
    now: datetime, settings: Settings, newest_report_time: datetime | None
) -> datetime | None:
    """Debounce state after a restart.

    The newest surviving report only re-arms the gate if it still falls
    inside the cooldown window.
    """
    if newest_report_time is None:
        return None
    if now - newest_report_time < settings.cooldown:
        return newest_report_time
    return None
