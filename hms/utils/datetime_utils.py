# hms/utils/datetime_utils.py
"""
Timestamps are stored and compared in UTC.

SQLite hands DateTime(timezone=True) columns back naive, so anything read
from the database goes through as_utc before it is compared with utc_now().
"""

from datetime import datetime, timezone


def as_utc(dt: datetime) -> datetime:
    """
    Tz-aware UTC copy of dt. Naive values are taken to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
