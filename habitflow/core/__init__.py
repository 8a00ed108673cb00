"""
HabitFlow - Core package
Models and the progress engines (streaks, progression, statistics)
"""

from .models import (
    Habit,
    HabitDraft,
    HabitLog,
    HabitSuggestion,
    HabitType,
    Frequency,
    UserProfile,
    ValidationError,
    LEVEL_THRESHOLDS
)

from .log_store import LogStore
from .registry import HabitRegistry

__all__ = [
    # Models
    'Habit',
    'HabitDraft',
    'HabitLog',
    'HabitSuggestion',
    'HabitType',
    'Frequency',
    'UserProfile',
    'ValidationError',
    'LEVEL_THRESHOLDS',

    # Stores
    'LogStore',
    'HabitRegistry'
]
