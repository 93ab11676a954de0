"""Callback query handlers for inline buttons."""

import logging

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from beetbell.bot.handlers import is_owner, report
from beetbell.bot.keyboards import confirm_cancel_keyboard
from beetbell.engine.reminder_engine import ReminderEngine

logger = logging.getLogger(__name__)


async def handle_report_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the 'I ate beets' button."""
    query = update.callback_query
    engine: ReminderEngine = context.bot_data["engine"]

    text, keyboard = await report(engine)
    await query.answer()
    if query.message:
        await query.message.reply_html(text, reply_markup=keyboard)


async def handle_accelerate_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle a confirmed 'Accelerate All Timers'."""
    query = update.callback_query
    engine: ReminderEngine = context.bot_data["engine"]

    count = await engine.accelerate_all()
    await query.answer(f"Accelerated {count}")
    if query.message:
        await query.message.edit_text(
            f"⏩ <b>Accelerated {count} timer{'s' if count != 1 else ''}</b>",
            parse_mode=ParseMode.HTML,
        )


async def handle_clear_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle a confirmed 'Clear'."""
    query = update.callback_query
    engine: ReminderEngine = context.bot_data["engine"]

    await engine.clear_all()
    await query.answer("Cleared")
    if query.message:
        await query.message.edit_text("🗑 All reminders cleared.")


async def handle_dismiss_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle 'Got it' on a fired reminder."""
    query = update.callback_query
    engine: ReminderEngine = context.bot_data["engine"]

    engine.dismiss_alert()
    await query.answer("Dismissed")
    if query.message:
        await query.message.edit_reply_markup(reply_markup=None)


async def callback_router(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route callback queries to appropriate handlers."""
    if not update.callback_query:
        return

    query = update.callback_query
    data = query.data

    if not data:
        return

    if not is_owner(update, context):
        await query.answer("Not your BeetBell")
        return

    parts = data.split(":")

    if parts[0] == "report":
        await handle_report_callback(update, context)

    elif parts[0] == "accelerate_confirm":
        await query.answer()
        if query.message:
            await query.message.reply_text(
                "Fire all active reminders now?",
                reply_markup=confirm_cancel_keyboard("accelerate"),
            )

    elif parts[0] == "confirm" and len(parts) > 1 and parts[1] == "accelerate":
        await handle_accelerate_callback(update, context)

    elif parts[0] == "confirm" and len(parts) > 1 and parts[1] == "clear":
        await handle_clear_callback(update, context)

    elif parts[0] == "dismiss":
        await handle_dismiss_callback(update, context)

    elif parts[0] == "cancel":
        if query.message:
            await query.message.delete()
        await query.answer("Cancelled")

    else:
        await query.answer("Unknown action")
