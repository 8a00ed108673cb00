#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitFlow - Statistics
Weekly completion trend, activity heatmap and per-habit day views.

Everything here is a pure function over a snapshot of logs and is
recomputed on demand.
"""

import math
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from habitflow.core.models import HabitLog
from habitflow.utils.datetime_utils import current_week_days, last_n_days, today_key, weekday_label

HEATMAP_DAYS = 14 * 7
MAX_INTENSITY = 4


@dataclass(frozen=True)
class DayStat:
    """Completion summary of one day"""
    date: str
    label: str
    completed_habit_ids: FrozenSet[str]
    total_habits: int
    completion_rate: int

    @property
    def completed_habits(self) -> int:
        return len(self.completed_habit_ids)


@dataclass(frozen=True)
class HeatmapCell:
    date: str
    intensity: int


def completion_rate(completed: int, total: int) -> int:
    """Percentage of habits done, 0 when there are no habits"""
    if total <= 0:
        return 0
    # half-up, not round()'s half-to-even
    return math.floor(completed * 100 / total + 0.5)


def weekly_stats(logs: Iterable[HabitLog], total_habits: int, today: Optional[str] = None) -> List[DayStat]:
    """Stats for the 7 days ending today, oldest first"""
    days = last_n_days(7, today or today_key())

    done_by_day: Dict[str, Set[str]] = defaultdict(set)
    for log in logs:
        if log.is_satisfying:
            done_by_day[log.date].add(log.habit_id)

    stats = []
    for day in days:
        completed = frozenset(done_by_day.get(day, ()))
        stats.append(DayStat(
            date=day,
            label=weekday_label(day),
            completed_habit_ids=completed,
            total_habits=total_habits,
            completion_rate=completion_rate(len(completed), total_habits)
        ))
    return stats


def heatmap(logs: Iterable[HabitLog], window_days: int = HEATMAP_DAYS, today: Optional[str] = None) -> List[HeatmapCell]:
    """Daily activity over a trailing window, raw log counts clipped to 0-4"""
    counts = Counter(log.date for log in logs)
    return [
        HeatmapCell(date=day, intensity=min(MAX_INTENSITY, counts.get(day, 0)))
        for day in last_n_days(window_days, today or today_key())
    ]


def progress_on(habit_id: str, logs: Iterable[HabitLog], day: str) -> int:
    """Total logged amount for a habit on a day"""
    return sum(log.value for log in logs if log.habit_id == habit_id and log.date == day)


def week_completion(habit_id: str, logs: Iterable[HabitLog], today: Optional[str] = None) -> List[Tuple[str, bool]]:
    """(day, done) for Monday..Sunday of the current week"""
    done = {log.date for log in logs if log.habit_id == habit_id and log.is_satisfying}
    return [(day, day in done) for day in current_week_days(today)]
