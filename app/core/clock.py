"""
Server clock.

All stored times are naive server-local datetimes. The API reads the current
time through ``get_now`` so tests can pin it.
"""

from datetime import datetime
from typing import Optional


def get_now() -> datetime:
    return datetime.now()


def as_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Convert offset-aware input to naive server-local time."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
