"""Stats aggregator: turns check-in events into per-user stats.

Each user's :class:`UserStats` is stored as its own JSON document under
``user-stats-<userId>``. Check-ins update counts, visited locations and the
streak; check-outs add study time. Both then award any newly earned badges.
"""

import datetime
import logging
from collections.abc import Callable

import pydantic

from .. import settings
from ..checkin.models import CheckInRecord
from ..checkin.services import CheckInStore
from ..clock import Clock, as_utc, utc_now
from ..storage.stores import JsonDocument, KeyValueStore
from . import achievements, levels, streak
from .badges import evaluate_badges
from .models import Achievement, LevelProgress, UserStats

logger = logging.getLogger(__name__)

STATS_KEY_PREFIX = 'user-stats-'

_stats_adapter = pydantic.TypeAdapter(UserStats)


class StatsAggregator:
    """Maintain the stats projection for each user."""

    def __init__(
        self,
        store: KeyValueStore,
        check_ins: CheckInStore,
        clock: Clock = utc_now,
        tz: datetime.tzinfo | None = None,
    ) -> None:
        self.store = store
        self.check_ins = check_ins
        self.clock = clock
        self.tz = tz if tz is not None else settings.get_timezone()

    def _document(self, user_id: str) -> JsonDocument[UserStats]:
        return JsonDocument(
            self.store,
            f'{STATS_KEY_PREFIX}{user_id}',
            _stats_adapter,
            lambda: UserStats(user_id=user_id),
        )

    def _now(self) -> datetime.datetime:
        return as_utc(self.clock())

    def get_user_stats(self, user_id: str) -> UserStats:
        """Stored stats for the user, or all-zero defaults."""
        return self._document(user_id).load()

    def calculate_streak(self, user_id: str) -> int:
        """Current streak from the user's check-in history."""
        today = self._now().astimezone(self.tz).date()
        start_times = (r.start_time for r in self.check_ins.get_user_check_ins(user_id))
        return streak.calculate_streak(start_times, today, self.tz)

    def _record_badges(self, stats: UserStats) -> None:
        new_badges = evaluate_badges(stats, self._now())
        for badge in new_badges:
            logger.info('User %s earned badge %s', stats.user_id, badge.id)
        stats.badges.extend(new_badges)

    def _update(self, user_id: str, apply: Callable[[UserStats], None]) -> UserStats:
        def mutate(stats: UserStats) -> UserStats:
            apply(stats)
            self._record_badges(stats)
            return stats

        return self._document(user_id).update(mutate)

    def after_check_in(
        self, check_in: CheckInRecord, user_id: str | None = None
    ) -> UserStats:
        """Count a new check-in and refresh streak and badges."""
        user_id = user_id or check_in.user_id

        def apply(stats: UserStats) -> None:
            stats.total_check_ins += 1
            if check_in.location_id not in stats.locations_visited:
                stats.locations_visited.append(check_in.location_id)
            stats.current_streak = self.calculate_streak(user_id)
            stats.longest_streak = max(stats.longest_streak, stats.current_streak)
            stats.last_check_in = check_in.start_time

        stats = self._update(user_id, apply)
        logger.debug(
            'Stats for %s after check-in: %d check-ins, streak %d, level %d',
            user_id,
            stats.total_check_ins,
            stats.current_streak,
            stats.level,
        )
        return stats

    def after_check_out(
        self, check_in: CheckInRecord, user_id: str | None = None
    ) -> UserStats:
        """Add the finished visit's duration to the user's study hours."""
        user_id = user_id or check_in.user_id

        def apply(stats: UserStats) -> None:
            if check_in.duration_minutes is not None:
                stats.total_study_hours += check_in.duration_minutes / 60

        return self._update(user_id, apply)

    def get_achievements(self, user_id: str) -> list[Achievement]:
        return achievements.build_achievements(self.get_user_stats(user_id))

    def get_level_progress(self, user_id: str) -> LevelProgress:
        stats = self.get_user_stats(user_id)
        return LevelProgress(
            level=stats.level,
            points=stats.points,
            progress=levels.level_progress_percent(stats.points),
            next_level=stats.level + 1,
        )

    def reset_user_stats(self, user_id: str) -> None:
        """Forget everything recorded for the user's stats."""
        self._document(user_id).clear()
        logger.info('Reset stats for %s', user_id)
