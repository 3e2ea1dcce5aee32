"""
Day-Bucket Helpers

Normalizes timestamps to calendar days in the configured study timezone
and provides the week windows used by the analytics queries.

Usage:
    from study_tracker.services.study.day_buckets import today, week_start

    day = today()
    monday = week_start(day)
"""

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from zoneinfo import ZoneInfo

from study_tracker.config import settings


def today(tz: Optional[ZoneInfo] = None) -> date:
    """Return the current calendar day in the study timezone."""
    return datetime.now(tz or settings.study_tz).date()


def yesterday(tz: Optional[ZoneInfo] = None) -> date:
    """Return the previous calendar day in the study timezone."""
    return today(tz) - timedelta(days=1)


def day_start_epoch_ms(day: date, tz: Optional[ZoneInfo] = None) -> int:
    """
    Epoch milliseconds of local midnight for a day.

    Args:
        day: Calendar day.
        tz: Timezone the day is expressed in (defaults to the study timezone).

    Returns:
        int: Milliseconds since the Unix epoch.
    """
    midnight = datetime.combine(day, time.min, tzinfo=tz or settings.study_tz)
    return int(midnight.timestamp() * 1000)


def week_start(day: date) -> date:
    """
    Monday of the week containing ``day``.

    Sunday belongs to the week that started six days earlier.
    """
    return day - timedelta(days=day.weekday())


def week_window(day: date) -> tuple[date, date]:
    """Return ``[monday, next monday)`` for the week containing ``day``."""
    start = week_start(day)
    return start, start + timedelta(days=7)


def trailing_week_window(day: date) -> tuple[date, date]:
    """Return ``[day - 6 days, day + 1 day)``, the seven days ending on ``day``."""
    return day - timedelta(days=6), day + timedelta(days=1)


def minutes_to_hours(minutes: float) -> float:
    """Convert minutes to hours, rounded half-up to one decimal."""
    hours = Decimal(str(minutes)) / Decimal(60)
    return float(hours.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
