#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitFlow - Completion transitions
The state changes that touch logs and the user profile together.

Each function takes the current snapshots and returns new ones; the inputs
are left untouched, so a caller either swaps in every result or none.
"""

import logging
from typing import Optional, Tuple

from habitflow.core.log_store import LogStore
from habitflow.core.models import Habit, UserProfile
from habitflow.core.progression import apply_completion, apply_undo
from habitflow.core.registry import HabitRegistry

logger = logging.getLogger(__name__)


def toggle(habit: Habit, logs: LogStore, profile: UserProfile, today: str,
           amount: Optional[int] = None) -> Tuple[LogStore, UserProfile]:
    """Mark the habit done for today, or undo it if it already is"""
    new_logs = logs.copy()

    if logs.is_satisfied(habit.id, today):
        removed = new_logs.remove_for_day(habit.id, today)
        logger.debug(f"Undo {habit.id} on {today}: {removed} logs removed")
        return new_logs, apply_undo(profile)

    value = habit.completion_value(amount)
    if value <= 0:
        return logs, profile

    new_logs.add(habit.id, today, value)
    return new_logs, apply_completion(profile)


def record_progress(habit: Habit, logs: LogStore, profile: UserProfile, today: str,
                    amount: int) -> Tuple[LogStore, UserProfile]:
    """Add an increment (counter tap, finished timer) without toggling.

    XP is granted only when the day goes from not done to done, so one undo
    takes back exactly what was given.
    """
    value = habit.completion_value(amount)
    if value <= 0:
        return logs, profile

    was_satisfied = logs.is_satisfied(habit.id, today)
    new_logs = logs.copy()
    new_logs.add(habit.id, today, value)

    if was_satisfied:
        return new_logs, profile
    return new_logs, apply_completion(profile)


def delete_habit(habit_id: str, registry: HabitRegistry, logs: LogStore) -> Tuple[HabitRegistry, LogStore]:
    """Remove a habit together with every log that references it"""
    if habit_id not in registry:
        return registry, logs

    new_registry = registry.copy()
    new_logs = logs.copy()
    habit = new_registry.remove(habit_id)
    removed = new_logs.remove_for_habit(habit_id)
    logger.info(f"Habit deleted: {habit.name} ({habit_id}), {removed} logs removed")
    return new_registry, new_logs
