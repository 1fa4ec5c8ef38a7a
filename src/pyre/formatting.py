"""Value formatting helpers shared by views, renderers and the CLI."""

from datetime import datetime, timedelta
from typing import Optional

from pyre.models import as_utc, utcnow


# API placeholders that mean "no value"
_EMPTY_VALUES = {"", "n/a", "ukn", "[n/a]", "unknown"}


def clean_value(value: Optional[str]) -> str:
    """Normalize placeholder API values like "N/A" or "ukn" to an empty string."""
    if value is None:
        return ""
    if value.strip().lower() in _EMPTY_VALUES:
        return ""
    return value


def truncate(text: str, max_len: int, ellipsis: str = "...") -> str:
    """Truncate text to max_len characters, marking the cut with an ellipsis."""
    if len(text) <= max_len:
        return text
    if max_len <= len(ellipsis):
        return text[:max_len]
    return text[: max_len - len(ellipsis)] + ellipsis


def format_number(value: int) -> str:
    """Format an integer with thousand separators."""
    return f"{value:,}"


def format_bytes(num_bytes: int) -> str:
    """Format a byte count as a human readable size (1024 based)."""
    if num_bytes == 0:
        return "0 B"
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"
    div, exp = unit, 0
    n = num_bytes // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{num_bytes / div:.1f} {'KMGTPE'[exp]}B"


def format_packets(packets: int) -> str:
    """Format a packet count with K/M/B suffixes."""
    if packets < 1000:
        return str(packets)
    if packets < 1_000_000:
        return f"{packets / 1000:.1f}K"
    if packets < 1_000_000_000:
        return f"{packets / 1_000_000:.1f}M"
    return f"{packets / 1_000_000_000:.1f}B"


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as e.g. "2h 05m" or "3d 4h"."""
    seconds = max(0, int(seconds))
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def format_ago(moment: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Describe how long ago ``moment`` was ("never" when unset)."""
    if moment is None:
        return "never"
    now = as_utc(now) or utcnow()
    delta = now - as_utc(moment)
    if delta < timedelta(0):
        delta = timedelta(0)
    return f"{format_duration(int(delta.total_seconds()))} ago"
