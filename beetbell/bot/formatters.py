"""Message text formatters."""

from datetime import datetime, timedelta
from typing import List

from beetbell.db.models import ReminderEvent, Settings
from beetbell.utils.constants import FIRE_BODY, FIRE_TITLE
from beetbell.utils.time_utils import format_minutes, format_number, format_time


def format_report_confirmation(event: ReminderEvent, position: int) -> str:
    """Format the reply to an accepted report."""
    return (
        f"✓ <b>Beet #{position} logged</b>\n\n"
        f"⏳ I'll remind you in {format_time(event.remaining)} "
        f"({format_number(event.delay_hours_used)}h timer)."
    )


def format_debounced(remaining: timedelta, settings: Settings) -> str:
    """Format the reply to a report inside the cooldown window."""
    lines = [f"⏸ Wait {format_time(remaining)}"]
    if settings.cooldown_minutes > 0:
        lines.append(f"(One report every {format_minutes(settings.cooldown_minutes)})")
    return "\n".join(lines)


def format_event_list(events: List[ReminderEvent], now: datetime) -> str:
    """Format the live reminders, numbered in creation order."""
    if not events:
        return "No active reminders."

    lines = ["<b>Active Reminders:</b>"]
    for index, event in enumerate(events, start=1):
        line = f"⏳ Beet #{index}: {format_time(event.remaining_at(now))}"
        if event.delay_hours_used:
            line += f" ({format_number(event.delay_hours_used)}h timer)"
        lines.append(line)

    return "\n".join(lines)


def format_status(
    events: List[ReminderEvent], settings: Settings, remaining: timedelta, now: datetime
) -> str:
    """Reminder list plus the state of the report button."""
    lines = [format_event_list(events, now), ""]

    if remaining > timedelta(0):
        lines.append(format_debounced(remaining, settings))
    else:
        lines.append("🍠 Ready for the next report.")

    return "\n".join(lines)


def format_settings(settings: Settings) -> str:
    return (
        "<b>Settings</b>\n\n"
        f"⏰ Reminder delay: {format_number(settings.reminder_hours)} hours\n"
        f"⏸ Cooldown: {format_minutes(settings.cooldown_minutes)}\n\n"
        "Change with /settings &lt;hours&gt; &lt;minutes&gt;, "
        "e.g. <code>/settings 10 30</code>"
    )


def format_fire_message(event: ReminderEvent) -> str:
    return (
        f"🔔 <b>{FIRE_TITLE}</b> 🔔\n\n"
        f"{FIRE_BODY}\n\n"
        f"<i>{format_number(event.delay_hours_used)}h timer finished</i>"
    )


def format_accelerate_message(count: int) -> str:
    return f"⏩ Accelerating {count} timer{'s' if count != 1 else ''}..."


def format_welcome_message() -> str:
    """Format the welcome message for /start."""
    return """
<b>Welcome to BeetBell!</b> 🍠

Ate beets? Tell me, and I'll remind you hours later so the colour of things
doesn't catch you by surprise.

<b>Quick Start:</b>
• Tap <b>I ate beets</b> below, send /ate or just say "beets"
• /list - See your active reminders
• /settings - Change the reminder delay and cooldown
• /help - Full command list
""".strip()


def format_help_message() -> str:
    """Format the help message."""
    return """
<b>BeetBell Commands 🍠</b>

<b>Reporting:</b>
/ate - Log that you ate beets (or just send "beets")

<b>Reminders:</b>
/list - Active reminders and cooldown
/accelerate - Fire every reminder now
/clear - Forget every reminder without firing

<b>Settings:</b>
/settings - Guided settings
/settings &lt;hours&gt; &lt;minutes&gt; - Set delay and cooldown directly
/cancel - Abort the guided settings

<b>Tips:</b>
• Repeat reports within the cooldown are ignored
• A cooldown of 0 accepts every report
• Changing the delay never moves reminders that are already running
""".strip()
