"""Main entry point for BeetBell bot."""

import logging
import sys

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from beetbell.bot.callbacks import callback_router
from beetbell.bot.conversations import build_settings_conversation_handler
from beetbell.bot.handlers import (
    accelerate_command,
    ate_command,
    clear_command,
    handle_plain_text,
    help_command,
    list_command,
    start_command,
)
from beetbell.bot.notifier import TelegramTrigger
from beetbell.config import Config
from beetbell.db.migrations import run_migrations
from beetbell.db.models import Settings
from beetbell.db.store import SqliteStore, create_store
from beetbell.engine.reminder_engine import ReminderEngine
from beetbell.engine.tick_scheduler import TickScheduler
from beetbell.utils.error_handler import error_handler

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


async def post_init(application: Application) -> None:
    """Initialize bot resources after application is created."""
    store = create_store(Config.STORE_BACKEND, Config.DATABASE_PATH)
    if isinstance(store, SqliteStore):
        await run_migrations(Config.DATABASE_PATH)
    await store.connect()
    application.bot_data["store"] = store

    owner_chat_id = Config.owner_chat_id()
    application.bot_data["owner_chat_id"] = owner_chat_id

    # Restore settings and reminders
    engine = ReminderEngine(
        store,
        trigger=TelegramTrigger(application.bot, owner_chat_id),
        default_settings=Settings(
            reminder_hours=Config.DEFAULT_REMINDER_HOURS,
            cooldown_minutes=Config.DEFAULT_COOLDOWN_MINUTES,
        ),
    )
    await engine.init()
    application.bot_data["engine"] = engine

    # Start the tick job
    scheduler = TickScheduler(interval=Config.TICK_INTERVAL)
    if application.job_queue:
        scheduler.start(application.job_queue)
    else:
        logger.error("JobQueue unavailable, install python-telegram-bot[job-queue]")
    application.bot_data["scheduler"] = scheduler

    logger.info("BeetBell initialized successfully")


async def post_shutdown(application: Application) -> None:
    """Cleanup resources on shutdown."""
    scheduler: TickScheduler | None = application.bot_data.get("scheduler")
    if scheduler:
        scheduler.stop()

    engine: ReminderEngine | None = application.bot_data.get("engine")
    if engine:
        await engine.shutdown()

    store = application.bot_data.get("store")
    if store:
        await store.close()

    logger.info("BeetBell shut down")


def main() -> None:
    """Start the bot."""
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    application = (
        Application.builder()
        .token(Config.TELEGRAM_BOT_TOKEN)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    # Commands
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("ate", ate_command))
    application.add_handler(CommandHandler("list", list_command))
    application.add_handler(CommandHandler("accelerate", accelerate_command))
    application.add_handler(CommandHandler("clear", clear_command))

    # Settings (guided or one-shot)
    application.add_handler(build_settings_conversation_handler())

    # Callback queries (buttons)
    application.add_handler(CallbackQueryHandler(callback_router))

    # Plain text handler (must be last)
    application.add_handler(
        MessageHandler(filters.TEXT & ~filters.COMMAND, handle_plain_text)
    )

    application.add_error_handler(error_handler)

    logger.info("Starting BeetBell bot...")
    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
