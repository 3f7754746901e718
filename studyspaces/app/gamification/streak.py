"""Consecutive-day study streaks."""

import datetime
from collections.abc import Iterable

from ..clock import local_day

ONE_DAY = datetime.timedelta(days=1)


def calculate_streak(
    start_times: Iterable[datetime.datetime],
    today: datetime.date,
    tz: datetime.tzinfo,
) -> int:
    """Count consecutive local days with a check-in, ending today.

    A day without a check-in yet does not break the streak: when today is
    missing, counting starts from yesterday instead. Any other gap ends it.
    """
    days = {local_day(start, tz) for start in start_times}
    streak = 0
    cursor = today
    while True:
        if cursor in days:
            streak += 1
            cursor -= ONE_DAY
        elif streak == 0 and cursor == today:
            cursor -= ONE_DAY
        else:
            return streak
