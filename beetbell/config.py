"""Configuration management from environment variables."""

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

from beetbell.utils import constants

# Load .env file if it exists
load_dotenv()


def _parse_float(name: str, text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {text!r}")


class Config:
    """Application configuration loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    OWNER_CHAT_ID: str = os.getenv("OWNER_CHAT_ID", "")

    # Storage
    STORE_BACKEND: Literal["sqlite", "memory"] = os.getenv("STORE_BACKEND", "sqlite")  # type: ignore
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "./data/beetbell.db"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Engine (raw env text, parsed by validate())
    TICK_INTERVAL_TEXT: str = os.getenv("TICK_INTERVAL", "1")
    DEFAULT_REMINDER_HOURS_TEXT: str = os.getenv(
        "DEFAULT_REMINDER_HOURS", str(constants.DEFAULT_REMINDER_HOURS)
    )
    DEFAULT_COOLDOWN_MINUTES_TEXT: str = os.getenv(
        "DEFAULT_COOLDOWN_MINUTES", str(constants.DEFAULT_COOLDOWN_MINUTES)
    )

    TICK_INTERVAL: float = 1.0
    DEFAULT_REMINDER_HOURS: float = constants.DEFAULT_REMINDER_HOURS
    DEFAULT_COOLDOWN_MINUTES: float = constants.DEFAULT_COOLDOWN_MINUTES

    @classmethod
    def owner_chat_id(cls) -> int:
        return int(cls.OWNER_CHAT_ID)

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration and parse the numeric settings."""
        if not cls.TELEGRAM_BOT_TOKEN:
            raise ValueError("TELEGRAM_BOT_TOKEN environment variable is required")

        if not cls.OWNER_CHAT_ID:
            raise ValueError("OWNER_CHAT_ID environment variable is required")
        try:
            cls.owner_chat_id()
        except ValueError:
            raise ValueError("OWNER_CHAT_ID must be a numeric Telegram chat id")

        if cls.STORE_BACKEND not in ("sqlite", "memory"):
            raise ValueError("STORE_BACKEND must be 'sqlite' or 'memory'")

        tick_interval = _parse_float("TICK_INTERVAL", cls.TICK_INTERVAL_TEXT)
        reminder_hours = _parse_float("DEFAULT_REMINDER_HOURS", cls.DEFAULT_REMINDER_HOURS_TEXT)
        cooldown_minutes = _parse_float(
            "DEFAULT_COOLDOWN_MINUTES", cls.DEFAULT_COOLDOWN_MINUTES_TEXT
        )

        if not 0 < tick_interval < float("inf"):
            raise ValueError("TICK_INTERVAL must be greater than 0")

        if not 0 < reminder_hours <= constants.MAX_REMINDER_HOURS:
            raise ValueError(
                f"DEFAULT_REMINDER_HOURS must be > 0 and <= {constants.MAX_REMINDER_HOURS:g}"
            )
        if not 0 <= cooldown_minutes <= constants.MAX_COOLDOWN_MINUTES:
            raise ValueError(
                f"DEFAULT_COOLDOWN_MINUTES must be >= 0 and <= {constants.MAX_COOLDOWN_MINUTES:g}"
            )

        cls.TICK_INTERVAL = tick_interval
        cls.DEFAULT_REMINDER_HOURS = reminder_hours
        cls.DEFAULT_COOLDOWN_MINUTES = cooldown_minutes

        # Ensure database directory exists
        if cls.STORE_BACKEND == "sqlite":
            cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
