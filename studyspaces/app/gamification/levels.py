"""Level formula.

Points are one per check-in, ten per distinct location and one per full
study hour. Every fifty points is a level, starting at level 1.
"""

import math

POINTS_PER_LEVEL = 50
POINTS_PER_LOCATION = 10


def calculate_points(
    total_check_ins: int, locations_visited: int, total_study_hours: float
) -> int:
    return (
        total_check_ins
        + POINTS_PER_LOCATION * locations_visited
        + math.floor(total_study_hours)
    )


def level_for_points(points: int) -> int:
    return max(points, 0) // POINTS_PER_LEVEL + 1


def level_progress_percent(points: int) -> float:
    """Percentage of the way from the current level to the next, capped at 100."""
    level_start = (level_for_points(points) - 1) * POINTS_PER_LEVEL
    progress = (points - level_start) / POINTS_PER_LEVEL * 100
    return min(progress, 100.0)
