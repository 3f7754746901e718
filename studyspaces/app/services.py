"""Check-in workflow tying the check-in store to the stats aggregator.

A scan or check-out from the UI lands here. The store records the event,
then the aggregator updates the user's stats for it.
"""

import dataclasses
import datetime
import logging
from collections.abc import Callable

from .checkin.models import CheckInRecord, CheckInStats, LocationCheckInData
from .checkin.services import CheckInStore
from .clock import Clock, utc_now
from .gamification.models import UserStats
from .gamification.services import StatsAggregator
from .locations.models import StudyLocation
from .locations.services import LocationDirectory
from .storage.stores import ConcurrentWriteError, KeyValueStore

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class CheckInResult:
    """Outcome of a check-in or check-out.

    ``closed`` is the check-in that was closed to make room for a new one.
    """

    check_in: CheckInRecord
    stats: UserStats
    closed: CheckInRecord | None = None


class StudySpaceService:
    """Entry point for check-ins, check-outs and location activity."""

    def __init__(
        self,
        store: KeyValueStore,
        directory: LocationDirectory | None = None,
        clock: Clock = utc_now,
        tz: datetime.tzinfo | None = None,
    ) -> None:
        self.check_ins = CheckInStore(store, clock=clock, tz=tz)
        self.stats = StatsAggregator(store, self.check_ins, clock=clock, tz=tz)
        self.directory = directory or LocationDirectory()

    # ------------------------------------------------------------------
    # Check-in workflow
    # ------------------------------------------------------------------

    def _apply_stats(
        self,
        step: Callable[[CheckInRecord, str | None], UserStats],
        record: CheckInRecord,
    ) -> UserStats:
        """Run a stats step for a check-in change that is already saved.

        A lost stats write race is logged and the current stats are
        returned; the saved check-in change stands.
        """
        try:
            return step(record, record.user_id)
        except ConcurrentWriteError as e:
            logger.error(
                'Stats for %s not updated for check-in %s: %s',
                record.user_id,
                record.id,
                e,
            )
            return self.stats.get_user_stats(record.user_id)

    def check_in(self, location_id: str, user_id: str | None = None) -> CheckInResult:
        """Check the user in, closing (and crediting) any open check-in first."""
        closed = None
        if user_id:
            active = self.check_ins.get_active_check_in(user_id)
            if active is not None:
                closed = self.check_ins.check_out(active.id)
                if closed is not None:
                    self._apply_stats(self.stats.after_check_out, closed)

        record = self.check_ins.check_in(location_id, user_id)
        stats = self._apply_stats(self.stats.after_check_in, record)
        return CheckInResult(check_in=record, stats=stats, closed=closed)

    def check_in_with_qr(
        self, code: str, user_id: str | None = None
    ) -> CheckInResult | None:
        """Check in with a scanned QR payload; None if it is not a location code."""
        location_id = self.check_ins.validate_qr_code(code)
        if location_id is None:
            logger.info('Rejected QR payload %r', code)
            return None
        return self.check_in(location_id, user_id)

    def check_out(self, check_in_id: str) -> CheckInResult | None:
        """Close a check-in and credit its duration; None if nothing was open."""
        record = self.check_ins.check_out(check_in_id)
        if record is None:
            return None
        stats = self._apply_stats(self.stats.after_check_out, record)
        return CheckInResult(check_in=record, stats=stats)

    def check_out_user(self, user_id: str) -> CheckInResult | None:
        """Close the user's open check-in, if there is one."""
        active = self.check_ins.get_active_check_in(user_id)
        if active is None:
            return None
        return self.check_out(active.id)

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def list_locations(self) -> list[StudyLocation]:
        """All known locations with their current occupancy filled in."""
        return [
            location.model_copy(
                update={
                    'current_occupancy': self.check_ins.get_current_occupancy(
                        location.id
                    )
                }
            )
            for location in self.directory.get_locations()
        ]

    def get_location_data(self, location_id: str) -> LocationCheckInData | None:
        location = self.directory.get_location_by_id(location_id)
        if location is None:
            return None
        return self.check_ins.get_location_data(location)

    def get_stats(self) -> CheckInStats:
        return self.check_ins.get_stats()
