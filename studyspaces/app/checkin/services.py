"""Check-in store: the persisted collection of check-in records.

All records live in one JSON document under the ``checkins`` key. Every
mutation rewrites the whole collection through :meth:`JsonDocument.update`.
A user has at most one active check-in; checking in again closes the
previous one first.
"""

import collections
import datetime
import logging
import uuid

import pydantic

from .. import settings
from ..clock import Clock, as_utc, elapsed_minutes, local_hour, utc_now
from ..locations.models import StudyLocation
from ..storage.stores import JsonDocument, KeyValueStore
from . import qr
from .models import (
    CheckInRecord,
    CheckInStats,
    LocationCheckInData,
    PopularLocation,
    PopularTime,
)

logger = logging.getLogger(__name__)

CHECKINS_KEY = 'checkins'
POPULAR_LOCATION_LIMIT = 5

_records_adapter = pydantic.TypeAdapter(list[CheckInRecord])


def _close(record: CheckInRecord, now: datetime.datetime) -> None:
    record.end_time = now
    record.active = False
    record.duration_minutes = elapsed_minutes(record.start_time, now)


class CheckInStore:
    """Create, close and query check-in records."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock = utc_now,
        tz: datetime.tzinfo | None = None,
    ) -> None:
        self.document: JsonDocument[list[CheckInRecord]] = JsonDocument(
            store, CHECKINS_KEY, _records_adapter, list
        )
        self.clock = clock
        self.tz = tz if tz is not None else settings.get_timezone()

    def _now(self) -> datetime.datetime:
        return as_utc(self.clock())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def check_in(self, location_id: str, user_id: str | None = None) -> CheckInRecord:
        """Open a check-in for ``user_id`` at ``location_id``.

        Without a user id an anonymous one is generated. Any check-in the
        user still has open is closed in the same write.
        """
        now = self._now()
        if not user_id:
            user_id = f'anonymous-{uuid.uuid4().hex}'
        record = CheckInRecord(
            id=f'checkin-{uuid.uuid4().hex}',
            location_id=location_id,
            user_id=user_id,
            start_time=now,
        )

        def mutate(records: list[CheckInRecord]) -> None:
            for existing in records:
                if existing.user_id == user_id and existing.active:
                    logger.warning(
                        'Closing open check-in %s for %s before new check-in',
                        existing.id,
                        user_id,
                    )
                    _close(existing, now)
            records.append(record)

        self.document.update(mutate)
        logger.info('User %s checked in at %s (%s)', user_id, location_id, record.id)
        return record

    def check_out(self, check_in_id: str) -> CheckInRecord | None:
        """Close an active check-in.

        Returns None when the id is unknown or the check-in was already closed.
        """
        now = self._now()

        def mutate(records: list[CheckInRecord]) -> CheckInRecord | None:
            record = next((r for r in records if r.id == check_in_id), None)
            if record is None or not record.active:
                return None
            _close(record, now)
            return record

        record = self.document.update(mutate)
        if record is None:
            logger.info('Check-out of unknown or closed check-in %s', check_in_id)
        else:
            logger.info(
                'User %s checked out of %s after %d minutes',
                record.user_id,
                record.location_id,
                record.duration_minutes,
            )
        return record

    def cleanup_old_check_ins(self, days_to_keep: int = 30) -> int:
        """Drop closed check-ins that started more than ``days_to_keep`` days ago.

        Active check-ins are always kept. Returns the number of records removed.
        """
        cutoff = self._now() - datetime.timedelta(days=days_to_keep)

        def mutate(records: list[CheckInRecord]) -> int:
            kept = [r for r in records if r.active or r.start_time >= cutoff]
            removed = len(records) - len(kept)
            records[:] = kept
            return removed

        removed = self.document.update(mutate)
        logger.info(
            'Removed %d check-ins that started before %s', removed, cutoff.isoformat()
        )
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_check_ins(self) -> list[CheckInRecord]:
        """Return every stored record in insertion order."""
        return self.document.load()

    def get_active_check_in(self, user_id: str) -> CheckInRecord | None:
        """Return the user's open check-in, if any."""
        return next(
            (r for r in self.get_all_check_ins() if r.user_id == user_id and r.active),
            None,
        )

    def get_user_check_ins(self, user_id: str) -> list[CheckInRecord]:
        return [r for r in self.get_all_check_ins() if r.user_id == user_id]

    def get_location_check_ins(self, location_id: str) -> list[CheckInRecord]:
        return [r for r in self.get_all_check_ins() if r.location_id == location_id]

    def get_current_occupancy(self, location_id: str) -> int:
        """Number of open check-ins at a location."""
        return sum(
            1
            for r in self.get_all_check_ins()
            if r.location_id == location_id and r.active
        )

    def get_stats(self) -> CheckInStats:
        """Aggregate totals and the most visited locations."""
        records = self.get_all_check_ins()
        durations = [
            r.duration_minutes for r in records if r.duration_minutes is not None
        ]
        average = _mean_minutes(durations) if durations else 0
        counts = collections.Counter(r.location_id for r in records)
        # Counter keeps first-insertion order; sorted() is stable.
        popular = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return CheckInStats(
            total_check_ins=len(records),
            active_check_ins=sum(1 for r in records if r.active),
            average_duration=average,
            popular_locations=[
                PopularLocation(location_id=location_id, count=count)
                for location_id, count in popular[:POPULAR_LOCATION_LIMIT]
            ],
        )

    def get_location_data(self, location: StudyLocation) -> LocationCheckInData:
        """Check-in activity for one location."""
        records = self.get_location_check_ins(location.id)
        hours = collections.Counter(local_hour(r.start_time, self.tz) for r in records)
        popular_times = sorted(hours.items(), key=lambda item: item[1], reverse=True)
        return LocationCheckInData(
            location_id=location.id,
            location_name=location.name,
            total_check_ins=len(records),
            current_occupancy=sum(1 for r in records if r.active),
            capacity=location.capacity or 0,
            last_check_in=max((r.start_time for r in records), default=None),
            popular_times=[
                PopularTime(hour=hour, count=count) for hour, count in popular_times
            ],
        )

    # ------------------------------------------------------------------
    # QR codes
    # ------------------------------------------------------------------

    @staticmethod
    def validate_qr_code(code: str) -> str | None:
        return qr.validate_qr_code(code)

    @staticmethod
    def generate_qr_code(location_id: str) -> str:
        return qr.generate_qr_code(location_id)


def _mean_minutes(durations: list[int]) -> int:
    """Mean of ``durations`` rounded half up to whole minutes."""
    total = sum(durations)
    return (2 * total + len(durations)) // (2 * len(durations))
