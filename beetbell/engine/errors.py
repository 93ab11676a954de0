"""Error types for the reminder core."""

from datetime import timedelta


class BeetBellError(Exception):
    """Base class for reminder core errors."""


class PersistenceError(BeetBellError):
    """A key-value store read or write failed."""


class ValidationError(BeetBellError):
    """Settings candidate rejected; the active settings are unchanged."""


class MalformedRecord(BeetBellError):
    """A persisted settings or ledger entry could not be decoded."""


class Debounced(BeetBellError):
    """A report arrived inside the cooldown window."""

    def __init__(self, remaining: timedelta):
        super().__init__(f"Report rejected, cooldown has {remaining} left")
        self.remaining = remaining
