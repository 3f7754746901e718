"""Achievement goals shown with progress bars on the profile page."""

import dataclasses
import math
from collections.abc import Callable

from .models import Achievement, UserStats


@dataclasses.dataclass(frozen=True)
class Goal:
    id: str
    title: str
    description: str
    target: int
    measure: Callable[[UserStats], float]


GOALS = (
    Goal(
        'streak-7',
        'Week Warrior',
        'Study for 7 consecutive days',
        7,
        lambda s: s.current_streak,
    ),
    Goal(
        'streak-30',
        'Monthly Master',
        'Study for 30 consecutive days',
        30,
        lambda s: s.current_streak,
    ),
    Goal(
        'explorer-5',
        'Explorer',
        'Visit 5 different locations',
        5,
        lambda s: len(s.locations_visited),
    ),
    Goal(
        'explorer-10',
        'City Navigator',
        'Visit 10 different locations',
        10,
        lambda s: len(s.locations_visited),
    ),
    Goal(
        'hours-100',
        'Study Champion',
        'Study for 100 hours',
        100,
        lambda s: s.total_study_hours,
    ),
)


def build_achievements(stats: UserStats) -> list[Achievement]:
    """Progress of ``stats`` toward every goal; the reward is the earned badge."""
    achievements: list[Achievement] = []
    for goal in GOALS:
        value = goal.measure(stats)
        achievements.append(
            Achievement(
                id=goal.id,
                title=goal.title,
                description=goal.description,
                progress=math.floor(value),
                target=goal.target,
                completed=value >= goal.target,
                reward=stats.get_badge(goal.id),
            )
        )
    return achievements
