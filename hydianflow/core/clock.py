"""
Time helpers.

Columns are naive ``DateTime`` holding UTC, so every timestamp written by the
service goes through ``utcnow``.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time without tzinfo"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
