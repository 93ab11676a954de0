"""Settings store - reminder delay and cooldown, loaded at startup, replaced on save."""

import logging
import math

from beetbell.db.codec import decode_settings, encode_settings
from beetbell.db.models import Settings
from beetbell.db.store import KeyValueStore
from beetbell.engine.errors import MalformedRecord, PersistenceError, ValidationError
from beetbell.utils.constants import MAX_COOLDOWN_MINUTES, MAX_REMINDER_HOURS, SETTINGS_KEY
from beetbell.utils.time_utils import format_number

logger = logging.getLogger(__name__)


def parse_settings(reminder_hours_text: str, cooldown_minutes_text: str) -> Settings:
    """Validate a settings candidate.

    Raises:
        ValidationError: if either value is not a finite number, the delay
            is not positive, the cooldown is negative, or either exceeds
            100 years.
    """
    try:
        reminder_hours = float(str(reminder_hours_text).strip())
        cooldown_minutes = float(str(cooldown_minutes_text).strip())
    except ValueError as e:
        raise ValidationError("Both values must be numbers") from e

    if not math.isfinite(reminder_hours) or not math.isfinite(cooldown_minutes):
        raise ValidationError("Both values must be finite numbers")
    if reminder_hours <= 0:
        raise ValidationError("Reminder delay must be greater than 0 hours")
    if reminder_hours > MAX_REMINDER_HOURS:
        raise ValidationError(
            f"Reminder delay cannot exceed {format_number(MAX_REMINDER_HOURS)} hours"
        )
    if cooldown_minutes < 0:
        raise ValidationError("Cooldown cannot be negative")
    if cooldown_minutes > MAX_COOLDOWN_MINUTES:
        raise ValidationError(
            f"Cooldown cannot exceed {format_number(MAX_COOLDOWN_MINUTES)} minutes"
        )

    return Settings(reminder_hours=reminder_hours, cooldown_minutes=cooldown_minutes)


class SettingsStore:
    """Holds the active settings and persists them on save."""

    def __init__(self, store: KeyValueStore, defaults: Settings | None = None):
        self.store = store
        self.defaults = defaults or Settings()
        self._current = self.defaults

    @property
    def current(self) -> Settings:
        return self._current

    async def load(self) -> Settings:
        """Load persisted settings. Never raises; falls back to defaults."""
        try:
            text = await self.store.get(SETTINGS_KEY)
        except PersistenceError as e:
            logger.error(f"Error loading settings: {e}")
            text = None

        if text is None:
            self._current = self.defaults
            logger.info("No saved settings, using defaults")
            return self._current

        try:
            self._current = decode_settings(text, self.defaults)
        except MalformedRecord as e:
            logger.error(f"Error loading settings: {e}")
            self._current = self.defaults

        logger.info(
            f"Settings loaded: {self._current.reminder_hours}h delay, "
            f"{self._current.cooldown_minutes}m cooldown"
        )
        return self._current

    async def save(self, reminder_hours_text: str, cooldown_minutes_text: str) -> Settings:
        """Validate, apply and persist new settings.

        On ValidationError the previous settings stay active. A failed write
        is logged; the new settings still apply in memory.
        """
        settings = parse_settings(reminder_hours_text, cooldown_minutes_text)
        self._current = settings

        try:
            await self.store.set(SETTINGS_KEY, encode_settings(settings))
        except PersistenceError as e:
            logger.error(f"Error saving settings: {e}")

        logger.info(
            f"Settings saved: {settings.reminder_hours}h delay, "
            f"{settings.cooldown_minutes}m cooldown"
        )
        return settings
