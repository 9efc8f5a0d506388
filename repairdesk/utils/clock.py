"""
Clock helpers

MongoDB hands back naive datetimes, so every timestamp the service writes is a
naive UTC datetime as well.
"""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current UTC time as a naive datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
