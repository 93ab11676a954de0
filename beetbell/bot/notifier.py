"""Telegram side of the reminder trigger."""

import logging

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import TelegramError

from beetbell.bot.formatters import format_accelerate_message, format_fire_message
from beetbell.bot.keyboards import alert_keyboard
from beetbell.db.models import ReminderEvent

logger = logging.getLogger(__name__)


class TelegramTrigger:
    """Sends fired reminders to the owner chat. Delivery is best-effort."""

    def __init__(self, bot: Bot, chat_id: int):
        self.bot = bot
        self.chat_id = chat_id

    async def on_fire(self, event: ReminderEvent) -> None:
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=format_fire_message(event),
                parse_mode=ParseMode.HTML,
                reply_markup=alert_keyboard(),
            )
        except TelegramError as e:
            logger.error(f"Failed to send reminder {event.id}: {e}")

    async def on_accelerate_all(self, count: int) -> None:
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=format_accelerate_message(count),
            )
        except TelegramError as e:
            logger.error(f"Failed to send accelerate notice: {e}")
