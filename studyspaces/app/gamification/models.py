"""Gamification data models: per-user stats, badges and achievements."""

from __future__ import annotations

import enum

import pydantic

from ..checkin.models import CamelModel
from ..clock import UtcDatetime
from . import levels


class BadgeCategory(enum.StrEnum):
    """Badge groupings shown on the profile page."""

    STREAK = 'streak'
    EXPLORATION = 'exploration'
    DEDICATION = 'dedication'
    SOCIAL = 'social'


class Badge(CamelModel):
    """A badge a user has earned."""

    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    earned_date: UtcDatetime


class UserStats(CamelModel):
    """Running totals for one user.

    ``level`` and ``points`` are derived from the totals every time they are
    read; any stored copy is ignored on load.
    """

    user_id: str
    total_check_ins: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    locations_visited: list[str] = []
    total_study_hours: float = 0.0
    badges: list[Badge] = []
    last_check_in: UtcDatetime | None = None

    @pydantic.computed_field  # type: ignore[prop-decorator]
    @property
    def points(self) -> int:
        return levels.calculate_points(
            self.total_check_ins, len(self.locations_visited), self.total_study_hours
        )

    @pydantic.computed_field  # type: ignore[prop-decorator]
    @property
    def level(self) -> int:
        return levels.level_for_points(self.points)

    def get_badge(self, badge_id: str) -> Badge | None:
        return next((badge for badge in self.badges if badge.id == badge_id), None)


class Achievement(CamelModel):
    """Progress toward a badge-bearing goal."""

    id: str
    title: str
    description: str
    progress: int
    target: int
    completed: bool
    reward: Badge | None = None


class LevelProgress(CamelModel):
    level: int
    points: int
    progress: float
    next_level: int
