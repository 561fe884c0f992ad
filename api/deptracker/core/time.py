"""Central time utilities for the application.

Timestamps are stored as naive UTC datetimes (TIMESTAMP WITHOUT TIME ZONE).
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as a naive datetime object.

    Replaces datetime.utcnow() while staying comparable with the naive
    DateTime columns used by the dependency tables.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
