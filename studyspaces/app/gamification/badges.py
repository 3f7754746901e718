"""Badge catalog and the rules that unlock each badge."""

from __future__ import annotations

import dataclasses
import datetime
import types
from collections.abc import Callable, Mapping

from .models import Badge, BadgeCategory, UserStats


@dataclasses.dataclass(frozen=True)
class BadgeDefinition:
    """A catalog entry: badge metadata plus its unlock predicate."""

    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    unlocked: Callable[[UserStats], bool]

    def award(self, earned_date: datetime.datetime) -> Badge:
        """Create the earned badge instance."""
        return Badge(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            category=self.category,
            earned_date=earned_date,
        )


_DEFINITIONS = (
    BadgeDefinition(
        id='first-checkin',
        name='First Steps',
        description='Complete your first check-in',
        icon='🎯',
        category=BadgeCategory.DEDICATION,
        unlocked=lambda s: s.total_check_ins >= 1,
    ),
    BadgeDefinition(
        id='streak-7',
        name='Week Warrior',
        description='Study for 7 consecutive days',
        icon='🔥',
        category=BadgeCategory.STREAK,
        unlocked=lambda s: s.current_streak >= 7,
    ),
    BadgeDefinition(
        id='streak-30',
        name='Monthly Master',
        description='Study for 30 consecutive days',
        icon='🏆',
        category=BadgeCategory.STREAK,
        unlocked=lambda s: s.current_streak >= 30,
    ),
    BadgeDefinition(
        id='explorer-5',
        name='Explorer',
        description='Visit 5 different locations',
        icon='🗺️',
        category=BadgeCategory.EXPLORATION,
        unlocked=lambda s: len(set(s.locations_visited)) >= 5,
    ),
    BadgeDefinition(
        id='explorer-10',
        name='City Navigator',
        description='Visit 10 different locations',
        icon='🧭',
        category=BadgeCategory.EXPLORATION,
        unlocked=lambda s: len(set(s.locations_visited)) >= 10,
    ),
    BadgeDefinition(
        id='hours-10',
        name='Getting Started',
        description='Study for 10 hours',
        icon='📚',
        category=BadgeCategory.DEDICATION,
        unlocked=lambda s: s.total_study_hours >= 10,
    ),
    BadgeDefinition(
        id='hours-50',
        name='Dedicated Learner',
        description='Study for 50 hours',
        icon='📖',
        category=BadgeCategory.DEDICATION,
        unlocked=lambda s: s.total_study_hours >= 50,
    ),
    BadgeDefinition(
        id='hours-100',
        name='Study Champion',
        description='Study for 100 hours',
        icon='🎓',
        category=BadgeCategory.DEDICATION,
        unlocked=lambda s: s.total_study_hours >= 100,
    ),
)

# Read-only, in evaluation order.
BADGE_CATALOG: Mapping[str, BadgeDefinition] = types.MappingProxyType(
    {definition.id: definition for definition in _DEFINITIONS}
)


def evaluate_badges(stats: UserStats, now: datetime.datetime) -> list[Badge]:
    """Return badges whose rule now holds and that ``stats`` does not hold yet."""
    earned = {badge.id for badge in stats.badges}
    return [
        definition.award(now)
        for definition in BADGE_CATALOG.values()
        if definition.id not in earned and definition.unlocked(stats)
    ]
