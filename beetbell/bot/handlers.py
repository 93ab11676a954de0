"""Command handlers."""

import logging
from typing import Tuple

from telegram import InlineKeyboardMarkup, Update
from telegram.ext import ContextTypes

from beetbell.bot.formatters import (
    format_debounced,
    format_help_message,
    format_report_confirmation,
    format_status,
    format_welcome_message,
)
from beetbell.bot.keyboards import confirm_cancel_keyboard, report_keyboard
from beetbell.engine.errors import Debounced
from beetbell.engine.reminder_engine import ReminderEngine
from beetbell.utils.constants import REPORT_PHRASES
from beetbell.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


def is_owner(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    """Only the configured owner chat is served."""
    if not update.effective_chat:
        return False
    return update.effective_chat.id == context.bot_data.get("owner_chat_id")


def main_keyboard(engine: ReminderEngine) -> InlineKeyboardMarkup:
    now = utc_now()
    return report_keyboard(engine.remaining_cooldown(now), len(engine.ledger) > 0)


async def report(engine: ReminderEngine) -> Tuple[str, InlineKeyboardMarkup]:
    """Run the report action and build the reply."""
    now = utc_now()
    try:
        event = await engine.report_event(now)
    except Debounced as e:
        logger.info(f"Report ignored, cooldown has {e.remaining} left")
        return format_debounced(e.remaining, engine.settings), main_keyboard(engine)

    text = format_report_confirmation(event, len(engine.ledger))
    return text, main_keyboard(engine)


async def refuse(update: Update) -> None:
    if update.effective_message:
        await update.effective_message.reply_text("Sorry, this BeetBell belongs to someone else.")


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    if not update.message:
        return
    if not is_owner(update, context):
        await refuse(update)
        return

    engine: ReminderEngine = context.bot_data["engine"]
    await update.message.reply_html(format_welcome_message(), reply_markup=main_keyboard(engine))


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    if not update.message:
        return

    await update.message.reply_html(format_help_message())


async def ate_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /ate command - report a beet event."""
    if not update.message:
        return
    if not is_owner(update, context):
        await refuse(update)
        return

    engine: ReminderEngine = context.bot_data["engine"]
    text, keyboard = await report(engine)
    await update.message.reply_html(text, reply_markup=keyboard)


async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /list command - show active reminders and the cooldown."""
    if not update.message:
        return
    if not is_owner(update, context):
        await refuse(update)
        return

    engine: ReminderEngine = context.bot_data["engine"]
    now = utc_now()
    message = format_status(
        engine.ledger.events, engine.settings, engine.remaining_cooldown(now), now
    )
    await update.message.reply_html(message, reply_markup=main_keyboard(engine))


async def accelerate_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /accelerate command - ask before firing everything."""
    if not update.message:
        return
    if not is_owner(update, context):
        await refuse(update)
        return

    engine: ReminderEngine = context.bot_data["engine"]
    if len(engine.ledger) == 0:
        await update.message.reply_text("No active reminders to accelerate.")
        return

    await update.message.reply_html(
        f"Fire all <b>{len(engine.ledger)}</b> active reminders now?",
        reply_markup=confirm_cancel_keyboard("accelerate"),
    )


async def clear_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /clear command - ask before forgetting everything."""
    if not update.message:
        return
    if not is_owner(update, context):
        await refuse(update)
        return

    engine: ReminderEngine = context.bot_data["engine"]
    if len(engine.ledger) == 0:
        await update.message.reply_text("No active reminders to clear.")
        return

    await update.message.reply_html(
        f"Forget all <b>{len(engine.ledger)}</b> active reminders without a reminder?",
        reply_markup=confirm_cancel_keyboard("clear"),
    )


async def handle_plain_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Treat "I ate beets" style messages as a report."""
    if not update.message or not update.message.text:
        return
    if not is_owner(update, context):
        await refuse(update)
        return

    text = update.message.text.strip().lower().rstrip("!.")
    if text not in REPORT_PHRASES:
        await update.message.reply_text(
            "Send \"beets\" or /ate to log a report. /help lists everything else."
        )
        return

    engine: ReminderEngine = context.bot_data["engine"]
    reply, keyboard = await report(engine)
    await update.message.reply_html(reply, reply_markup=keyboard)
