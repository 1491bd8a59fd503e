"""
Date and time utility functions.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def month_key(value: datetime) -> str:
    """Return the ``YYYY-MM`` bucket a datetime falls into."""
    return value.strftime("%Y-%m")
