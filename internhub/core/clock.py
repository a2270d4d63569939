"""
Marketplace clock.

Deadlines are calendar dates in the marketplace's time zone (settings.timezone).
Everything that decides whether an internship is open, and every timestamp the
app writes, reads the time from here.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from internhub.core.config import get_settings


def now() -> datetime:
    """Current time, aware, in the marketplace time zone."""
    return datetime.now(ZoneInfo(get_settings().timezone))


def today() -> date:
    return now().date()
