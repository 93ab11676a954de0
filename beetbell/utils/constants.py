"""Constants and default values."""

# Storage keys
SETTINGS_KEY = "beetbell-settings"
EVENTS_KEY = "beetbell-events"

# Default settings (seeded on first run)
DEFAULT_REMINDER_HOURS = 10.0
DEFAULT_COOLDOWN_MINUTES = 30.0

# Event ids look like "beet-1767225600000"
EVENT_ID_PREFIX = "beet"

# Messages
FIRE_TITLE = "BeetBell Reminder"
FIRE_BODY = "Don't panic! You're not dying. It's just beets. 🍠💩"

# Plain-text phrases that count as a report
REPORT_PHRASES = ["i ate beets", "ate beets", "beets", "beet"]

# Upper bounds for settings (100 years), keeps every datetime sum in range
MAX_REMINDER_HOURS = 100 * 365 * 24.0
MAX_COOLDOWN_MINUTES = MAX_REMINDER_HOURS * 60
