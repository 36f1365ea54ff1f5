"""
Lookback windows for aggregation queries.

Recognized windows: 24h, 7d, 30d. Anything else falls back to the
caller's default window.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

WINDOW_DAYS: Dict[str, int] = {
    "24h": 1,
    "7d": 7,
    "30d": 30,
}

DEFAULT_HOTSPOT_WINDOW = "7d"
DEFAULT_TIMESERIES_WINDOW = "30d"


def normalize_window(window: Optional[str], default: str = DEFAULT_HOTSPOT_WINDOW) -> str:
    """Return the window label actually used for the query."""
    if window in WINDOW_DAYS:
        return window
    return default


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def window_cutoff(window: str, now: Optional[datetime] = None) -> datetime:
    """created_at lower bound (inclusive) for a normalized window label."""
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - timedelta(days=WINDOW_DAYS[window])
