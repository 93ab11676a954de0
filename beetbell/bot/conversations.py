"""Conversation handlers for multi-step flows."""

import logging

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import (
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from beetbell.bot.formatters import format_settings
from beetbell.bot.handlers import is_owner, refuse
from beetbell.engine.errors import ValidationError
from beetbell.engine.reminder_engine import ReminderEngine
from beetbell.utils.time_utils import format_number

logger = logging.getLogger(__name__)

# Conversation states
HOURS, MINUTES = range(2)

KEEP_WORDS = ["keep", "skip", "same", ""]


async def apply_settings(
    update: Update, engine: ReminderEngine, hours_text: str, minutes_text: str
) -> None:
    """Save settings and report the outcome."""
    try:
        settings = await engine.save_settings(hours_text, minutes_text)
    except ValidationError as e:
        await update.effective_message.reply_text(
            f"❌ {e}\n\nSettings unchanged."
        )
        return

    await update.effective_message.reply_html("✓ Saved.\n\n" + format_settings(settings))


async def settings_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Start the /settings conversation, or save directly with two arguments."""
    if not update.message:
        return ConversationHandler.END
    if not is_owner(update, context):
        await refuse(update)
        return ConversationHandler.END

    engine: ReminderEngine = context.bot_data["engine"]

    if context.args:
        if len(context.args) != 2:
            await update.message.reply_text("Usage: /settings <hours> <minutes>")
            return ConversationHandler.END
        await apply_settings(update, engine, context.args[0], context.args[1])
        return ConversationHandler.END

    current = engine.settings
    context.user_data["settings_draft"] = {
        "hours": format_number(current.reminder_hours),
        "minutes": format_number(current.cooldown_minutes),
    }

    await update.message.reply_text(
        format_settings(current) + "\n\n"
        "How many <b>hours</b> until the reminder?\n"
        "Send <i>keep</i> to leave it as is, /cancel to abort.",
        parse_mode=ParseMode.HTML,
    )
    return HOURS


async def settings_hours(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive the reminder delay."""
    if not update.message or not update.message.text:
        return HOURS

    text = update.message.text.strip()
    if text.lower() not in KEEP_WORDS:
        context.user_data["settings_draft"]["hours"] = text

    await update.message.reply_text(
        "How many <b>minutes</b> between reports? (0 disables the cooldown)\n"
        "Send <i>keep</i> to leave it as is, /cancel to abort.",
        parse_mode=ParseMode.HTML,
    )
    return MINUTES


async def settings_minutes(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive the cooldown and save."""
    if not update.message or not update.message.text:
        return MINUTES

    draft = context.user_data.pop("settings_draft", {})
    text = update.message.text.strip()
    if text.lower() not in KEEP_WORDS:
        draft["minutes"] = text

    engine: ReminderEngine = context.bot_data["engine"]
    await apply_settings(update, engine, draft.get("hours", ""), draft.get("minutes", ""))
    return ConversationHandler.END


async def settings_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Cancel the conversation."""
    context.user_data.pop("settings_draft", None)

    if update.message:
        await update.message.reply_text("❌ Cancelled. Settings unchanged.")

    return ConversationHandler.END


def build_settings_conversation_handler() -> ConversationHandler:
    """Build the /settings conversation handler."""
    return ConversationHandler(
        entry_points=[CommandHandler("settings", settings_start)],
        states={
            HOURS: [MessageHandler(filters.TEXT & ~filters.COMMAND, settings_hours)],
            MINUTES: [MessageHandler(filters.TEXT & ~filters.COMMAND, settings_minutes)],
        },
        fallbacks=[CommandHandler("cancel", settings_cancel)],
        per_message=False,
        conversation_timeout=300,  # 5 minute timeout
    )
