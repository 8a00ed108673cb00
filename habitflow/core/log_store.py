# habitflow/core/log_store.py

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set

from habitflow.core.models import HabitLog, make_id
from habitflow.utils.datetime_utils import now_millis

logger = logging.getLogger(__name__)


class LogStore:
    """Append/remove-only collection of completion logs.

    Several rows may exist for the same habit and day (count increments);
    callers ask `is_satisfied` rather than counting rows.
    """

    def __init__(self, logs: Optional[Iterable[HabitLog]] = None):
        self._logs: List[HabitLog] = list(logs or [])

    def __iter__(self) -> Iterator[HabitLog]:
        return iter(self._logs)

    def __len__(self) -> int:
        return len(self._logs)

    def __eq__(self, other) -> bool:
        if not isinstance(other, LogStore):
            return NotImplemented
        return self._logs == other._logs

    def copy(self) -> "LogStore":
        return LogStore(self._logs)

    def ids(self) -> Set[str]:
        return {log.id for log in self._logs}

    def add(self, habit_id: str, day: str, value: int = 1) -> HabitLog:
        log = HabitLog(
            id=make_id(self.ids()),
            habit_id=habit_id,
            date=day,
            timestamp=now_millis(),
            value=value
        )
        self._logs.append(log)
        return log

    def remove_for_day(self, habit_id: str, day: str) -> int:
        """Drop every log of habit_id on day; returns how many were removed"""
        before = len(self._logs)
        self._logs = [log for log in self._logs if not (log.habit_id == habit_id and log.date == day)]
        return before - len(self._logs)

    def remove_for_habit(self, habit_id: str) -> int:
        before = len(self._logs)
        self._logs = [log for log in self._logs if log.habit_id != habit_id]
        removed = before - len(self._logs)
        if removed:
            logger.debug(f"Removed {removed} logs of habit {habit_id}")
        return removed

    def is_satisfied(self, habit_id: str, day: str) -> bool:
        return any(log.habit_id == habit_id and log.date == day and log.is_satisfying for log in self._logs)

    def to_list(self) -> List[Dict]:
        return [log.to_dict() for log in self._logs]

    @classmethod
    def from_list(cls, data: Iterable[Dict]) -> "LogStore":
        return cls(HabitLog.from_dict(item) for item in data)
