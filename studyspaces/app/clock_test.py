"""Unit tests for clock helpers."""

import datetime
import unittest
import zoneinfo
from datetime import UTC

from studyspaces.app import clock


class TestAsUtc(unittest.TestCase):
    """Tests for as_utc."""

    def test_naive_is_taken_as_utc(self) -> None:
        """Naive datetimes get the UTC zone attached."""
        value = clock.as_utc(datetime.datetime(2025, 3, 1, 12, 0))
        self.assertEqual(value, datetime.datetime(2025, 3, 1, 12, 0, tzinfo=UTC))

    def test_aware_is_converted(self) -> None:
        """Aware datetimes are converted to UTC."""
        brussels = zoneinfo.ZoneInfo('Europe/Brussels')
        value = clock.as_utc(datetime.datetime(2025, 3, 1, 12, 0, tzinfo=brussels))
        self.assertEqual(value.hour, 11)
        self.assertEqual(value.tzinfo, UTC)


class TestLocalDay(unittest.TestCase):
    """Tests for local_day and local_hour."""

    def test_day_boundary_depends_on_zone(self) -> None:
        """23:30 UTC is already the next day in Brussels."""
        late = datetime.datetime(2025, 3, 1, 23, 30, tzinfo=UTC)
        brussels = zoneinfo.ZoneInfo('Europe/Brussels')
        self.assertEqual(clock.local_day(late, UTC), datetime.date(2025, 3, 1))
        self.assertEqual(clock.local_day(late, brussels), datetime.date(2025, 3, 2))

    def test_local_hour(self) -> None:
        """local_hour reports the hour in the given zone."""
        value = datetime.datetime(2025, 7, 1, 8, 15, tzinfo=UTC)
        brussels = zoneinfo.ZoneInfo('Europe/Brussels')
        self.assertEqual(clock.local_hour(value, UTC), 8)
        self.assertEqual(clock.local_hour(value, brussels), 10)


class TestElapsedMinutes(unittest.TestCase):
    """Tests for elapsed_minutes."""

    def setUp(self) -> None:
        self.start = datetime.datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

    def test_whole_minutes(self) -> None:
        """Exact minutes are returned as-is."""
        end = self.start + datetime.timedelta(minutes=65)
        self.assertEqual(clock.elapsed_minutes(self.start, end), 65)

    def test_half_minute_rounds_up(self) -> None:
        """Thirty seconds rounds up, twenty-nine rounds down."""
        self.assertEqual(
            clock.elapsed_minutes(self.start, self.start + datetime.timedelta(seconds=90)),
            2,
        )
        self.assertEqual(
            clock.elapsed_minutes(self.start, self.start + datetime.timedelta(seconds=89)),
            1,
        )


if __name__ == '__main__':
    unittest.main()
