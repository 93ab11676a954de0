"""Global error handler for the bot."""

import logging
import traceback

from telegram import Update
from telegram.ext import ContextTypes

logger = logging.getLogger(__name__)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors in the bot."""
    logger.error("Exception while handling an update:", exc_info=context.error)

    tb_list = traceback.format_exception(None, context.error, context.error.__traceback__)
    tb_string = "".join(tb_list)
    logger.error(f"Traceback:\n{tb_string}")

    if isinstance(update, Update) and update.effective_message:
        try:
            error_message = (
                "😅 Oops! Something went wrong.\n\n"
                "Your reminders are safe. Please try again or use /help."
            )

            if "Timeout" in str(context.error):
                error_message = "⏱️ Request timed out.\n\nPlease try again in a moment."
            elif "Network" in str(context.error):
                error_message = "🌐 Network error.\n\nPlease check your connection and try again."

            await update.effective_message.reply_text(error_message)

        except Exception as e:
            logger.error(f"Failed to send error message to user: {e}")
