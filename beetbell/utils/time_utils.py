"""Time utilities."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

EPOCH = datetime(1970, 1, 1, tzinfo=ZoneInfo("UTC"))
ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Current UTC time, truncated to milliseconds."""
    return truncate_ms(datetime.now(ZoneInfo("UTC")))


def truncate_ms(dt: datetime) -> datetime:
    """Drop sub-millisecond precision so the value survives the epoch-ms wire format."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to integer milliseconds since the Unix epoch."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    return (dt - EPOCH) // ONE_MS


def from_epoch_ms(ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=ms)


def to_ms(delta: timedelta) -> int:
    """Convert a duration to whole milliseconds."""
    return delta // ONE_MS


def format_time(delta: timedelta) -> str:
    """Format a countdown.

    Examples:
        3 h 5 min 9 s -> "3h 5m 9s"
        5 min 0 s     -> "5m 0s"
        42 s          -> "42s"
    """
    total_seconds = max(0, int(delta.total_seconds()))
    h = total_seconds // 3600
    m = (total_seconds % 3600) // 60
    s = total_seconds % 60

    if h > 0:
        return f"{h}h {m}m {s}s"
    elif m > 0:
        return f"{m}m {s}s"
    else:
        return f"{s}s"


def format_number(value: float) -> str:
    """Format a setting value without a trailing ".0"."""
    if value == int(value):
        return str(int(value))
    return f"{value:g}"


def format_minutes(value: float) -> str:
    """Examples: 1 -> "1 minute", 30 -> "30 minutes", 0.5 -> "0.5 minutes"."""
    return f"{format_number(value)} minute{'s' if value != 1 else ''}"
