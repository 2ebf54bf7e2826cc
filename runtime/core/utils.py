"""Small utility helpers used across the gate."""

from __future__ import annotations

from datetime import datetime
from typing import Any

# Fixed vocabulary; strftime("%a") is locale dependent.
WEEKDAY_TOKENS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def local_now() -> datetime:
    """Current wall-clock time in the host's configured local zone."""
    return datetime.now()


def weekday_token(dt: datetime) -> str:
    return WEEKDAY_TOKENS[dt.weekday()]


def format_log_line(message: str, at: datetime) -> str:
    return f"[{at.strftime(LOG_TIMESTAMP_FORMAT)}] {message}"


def parse_local_datetime(raw: str) -> datetime:
    """Parse a naive local timestamp such as "2026-10-21 14:00".

    Timezone-aware inputs are converted to the host's local zone and made naive
    so they compare like `local_now()`.
    """
    parsed = datetime.fromisoformat(raw.strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def order_weekdays(tokens: Any) -> list[str]:
    """Known tokens in calendar order, then unknown tokens alphabetically."""
    known = [t for t in WEEKDAY_TOKENS if t in tokens]
    unknown = sorted(str(t) for t in tokens if t not in WEEKDAY_TOKENS)
    return known + unknown
