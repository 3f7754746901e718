"""Time helpers shared by the check-in and gamification services."""

import datetime
import math
from collections.abc import Callable
from datetime import UTC
from typing import Annotated

import pydantic

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    """Default clock: the current time in UTC."""
    return datetime.datetime.now(UTC)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# Datetime field type for persisted models.
UtcDatetime = Annotated[datetime.datetime, pydantic.AfterValidator(as_utc)]


def local_day(value: datetime.datetime, tz: datetime.tzinfo) -> datetime.date:
    """Calendar day of ``value`` in zone ``tz``."""
    return as_utc(value).astimezone(tz).date()


def local_hour(value: datetime.datetime, tz: datetime.tzinfo) -> int:
    """Hour of day (0-23) of ``value`` in zone ``tz``."""
    return as_utc(value).astimezone(tz).hour


def elapsed_minutes(start: datetime.datetime, end: datetime.datetime) -> int:
    """Whole minutes between two instants, rounding halves up."""
    seconds = (as_utc(end) - as_utc(start)).total_seconds()
    return math.floor(seconds / 60 + 0.5)
