"""UTC helpers shared by models and services.

SQLite hands back naive datetimes for ``DateTime(timezone=True)`` columns while
PostgreSQL returns aware ones; everything stored by this app is UTC, so naive
values are read as UTC.
"""

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_date(value: datetime) -> date:
    return as_utc(value).date()


def start_of_week(today: date) -> datetime:
    """Monday 00:00 UTC of the week containing ``today``."""
    monday = today - timedelta(days=today.weekday())
    return datetime(monday.year, monday.month, monday.day, tzinfo=timezone.utc)
