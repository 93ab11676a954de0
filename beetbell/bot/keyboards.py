"""Inline keyboard builders."""

from datetime import timedelta

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from beetbell.utils.time_utils import format_time


def report_keyboard(remaining: timedelta, has_events: bool) -> InlineKeyboardMarkup:
    """Main keyboard: report button, plus accelerate when reminders are live."""
    if remaining > timedelta(0):
        label = f"Wait {format_time(remaining)}"
    else:
        label = "🍠 I ate beets"

    rows = [[InlineKeyboardButton(label, callback_data="report")]]
    if has_events:
        rows.append(
            [InlineKeyboardButton("⏩ Accelerate All Timers", callback_data="accelerate_confirm")]
        )
    return InlineKeyboardMarkup(rows)


def confirm_cancel_keyboard(action: str) -> InlineKeyboardMarkup:
    """Keyboard for confirmations: Confirm, Cancel."""
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("✓ Confirm", callback_data=f"confirm:{action}"),
                InlineKeyboardButton("✗ Cancel", callback_data=f"cancel:{action}"),
            ]
        ]
    )


def alert_keyboard() -> InlineKeyboardMarkup:
    """Keyboard for fired reminders: Dismiss."""
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton("Got it", callback_data="dismiss")]]
    )
