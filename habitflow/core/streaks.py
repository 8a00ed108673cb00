# habitflow/core/streaks.py

from typing import Iterable, Optional, Set

from habitflow.core.models import HabitLog
from habitflow.utils.datetime_utils import previous_day, today_key

# Ten years of consecutive days; the walk never goes further back
MAX_STREAK_DAYS = 3660


def satisfied_days(habit_id: str, logs: Iterable[HabitLog]) -> Set[str]:
    """Day keys on which the habit has at least one log with value > 0"""
    return {log.date for log in logs if log.habit_id == habit_id and log.is_satisfying}


def current_streak(habit_id: str, logs: Iterable[HabitLog], today: Optional[str] = None) -> int:
    """Consecutive satisfied days ending today, or yesterday if today is still open.

    A missed today does not break the streak until the day is over, but
    any earlier gap ends it.
    """
    days = satisfied_days(habit_id, logs)
    if not days:
        return 0

    oldest = min(days)
    day = today or today_key()
    if day not in days:
        day = previous_day(day)

    streak = 0
    while day in days and streak < MAX_STREAK_DAYS:
        streak += 1
        if day <= oldest:
            break
        day = previous_day(day)

    return streak
