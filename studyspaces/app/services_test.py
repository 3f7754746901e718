"""Unit tests for the check-in workflow service."""

import datetime
import unittest
from datetime import UTC

from studyspaces.app import services
from studyspaces.app.locations.models import StudyLocation
from studyspaces.app.locations.services import LocationDirectory
from studyspaces.app.storage import stores

START = datetime.datetime(2025, 3, 10, 9, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock for deterministic timestamps."""

    def __init__(self, now: datetime.datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += datetime.timedelta(**kwargs)


class TestStudySpaceService(unittest.TestCase):
    """Tests for StudySpaceService."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        directory = LocationDirectory(
            [
                StudyLocation(
                    id='L1', name='Library', latitude=51.05, longitude=3.72, capacity=40
                ),
                StudyLocation(id='L2', name='Cafe', latitude=51.04, longitude=3.73),
            ]
        )
        self.service = services.StudySpaceService(
            stores.MemoryKeyValueStore(), directory, clock=self.clock, tz=UTC
        )

    def test_qr_check_in(self) -> None:
        """A valid QR payload checks the user in and updates stats."""
        result = self.service.check_in_with_qr('studyspaces-gent-L1', 'user-1')
        assert result is not None
        self.assertEqual(result.check_in.location_id, 'L1')
        self.assertEqual(result.stats.total_check_ins, 1)
        self.assertEqual(result.stats.level, 1)
        self.assertIn('first-checkin', [b.id for b in result.stats.badges])
        self.assertIsNone(result.closed)

    def test_invalid_qr(self) -> None:
        """Foreign QR payloads change nothing."""
        self.assertIsNone(self.service.check_in_with_qr('https://example.com', 'user-1'))
        self.assertEqual(self.service.get_stats().total_check_ins, 0)

    def test_check_in_closes_and_credits_open_check_in(self) -> None:
        """Moving to another location credits time spent at the first one."""
        self.service.check_in('L1', 'user-1')
        self.clock.advance(minutes=120)
        result = self.service.check_in('L2', 'user-1')

        assert result.closed is not None
        self.assertEqual(result.closed.location_id, 'L1')
        self.assertEqual(result.closed.duration_minutes, 120)
        self.assertAlmostEqual(result.stats.total_study_hours, 2.0)
        self.assertEqual(result.stats.total_check_ins, 2)
        self.assertEqual(self.service.check_ins.get_current_occupancy('L1'), 0)
        self.assertEqual(self.service.check_ins.get_current_occupancy('L2'), 1)

    def test_check_out(self) -> None:
        """Checking out adds the visit duration to study hours."""
        record = self.service.check_in('L1', 'user-1').check_in
        self.clock.advance(minutes=65)
        result = self.service.check_out(record.id)
        assert result is not None
        self.assertEqual(result.check_in.duration_minutes, 65)
        self.assertAlmostEqual(result.stats.total_study_hours, 65 / 60)
        self.assertIsNone(self.service.check_out(record.id))

    def test_check_out_user(self) -> None:
        """The user's open check-in is found and closed."""
        self.assertIsNone(self.service.check_out_user('user-1'))
        self.service.check_in('L1', 'user-1')
        self.clock.advance(minutes=30)
        result = self.service.check_out_user('user-1')
        assert result is not None
        self.assertFalse(result.check_in.active)
        self.assertIsNone(self.service.check_ins.get_active_check_in('user-1'))

    def test_anonymous_check_in(self) -> None:
        """Check-ins without a user are attributed to a generated id."""
        result = self.service.check_in('L1')
        self.assertTrue(result.check_in.user_id.startswith('anonymous-'))
        self.assertEqual(result.stats.user_id, result.check_in.user_id)

    def test_anonymous_visitors_stay_checked_in(self) -> None:
        """Anonymous check-ins at the same instant keep separate visits."""
        first = self.service.check_in('L1')
        second = self.service.check_in('L2')
        self.assertNotEqual(first.check_in.user_id, second.check_in.user_id)
        self.assertIsNone(second.closed)
        self.assertEqual(self.service.check_ins.get_current_occupancy('L1'), 1)
        self.assertEqual(self.service.check_ins.get_current_occupancy('L2'), 1)

    def test_list_locations_with_occupancy(self) -> None:
        """Locations carry their live occupancy."""
        self.service.check_in('L1', 'user-1')
        self.service.check_in('L1', 'user-2')
        occupancy = {
            loc.id: loc.current_occupancy for loc in self.service.list_locations()
        }
        self.assertEqual(occupancy, {'L1': 2, 'L2': 0})
        # The directory copies are left untouched.
        location = self.service.directory.get_location_by_id('L1')
        assert location is not None
        self.assertIsNone(location.current_occupancy)

    def test_location_data(self) -> None:
        """Location data is available for known locations only."""
        self.service.check_in('L1', 'user-1')
        data = self.service.get_location_data('L1')
        assert data is not None
        self.assertEqual(data.location_name, 'Library')
        self.assertEqual(data.current_occupancy, 1)
        self.assertIsNone(self.service.get_location_data('missing'))


class StatsLockedStore(stores.MemoryKeyValueStore):
    """Memory store whose user stats documents can be made unwritable."""

    def __init__(self) -> None:
        super().__init__()
        self.stats_locked = False

    def write(self, key: str, value: str, expected_version: int) -> int:
        if self.stats_locked and key.startswith('user-stats-'):
            raise stores.ConcurrentWriteError(key, expected_version)
        return super().write(key, value, expected_version)


class TestStatsWriteConflicts(unittest.TestCase):
    """Saved check-in changes survive a lost stats write."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.store = StatsLockedStore()
        self.service = services.StudySpaceService(
            self.store, clock=self.clock, tz=UTC
        )

    def test_check_out_is_not_reported_as_failed(self) -> None:
        record = self.service.check_in('L1', 'user-1').check_in
        self.clock.advance(minutes=90)
        self.store.stats_locked = True

        with self.assertLogs('studyspaces.app.services', level='ERROR'):
            result = self.service.check_out(record.id)

        assert result is not None
        self.assertFalse(result.check_in.active)
        self.assertEqual(result.check_in.duration_minutes, 90)
        self.assertEqual(result.stats.total_study_hours, 0.0)
        self.assertIsNone(self.service.check_ins.get_active_check_in('user-1'))

    def test_check_in_is_not_reported_as_failed(self) -> None:
        self.store.stats_locked = True

        with self.assertLogs('studyspaces.app.services', level='ERROR'):
            result = self.service.check_in('L1', 'user-1')

        self.assertTrue(result.check_in.active)
        self.assertEqual(result.stats.total_check_ins, 0)
        self.assertEqual(self.service.check_ins.get_current_occupancy('L1'), 1)


if __name__ == '__main__':
    unittest.main()
