# habitflow/core/registry.py

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set

from habitflow.core.models import (
    Habit, HabitDraft, HabitSuggestion, HabitType, ValidationError, make_id
)
from habitflow.utils.datetime_utils import now_millis

logger = logging.getLogger(__name__)


class HabitRegistry:
    """Owns the habit definitions, in creation order"""

    def __init__(self, habits: Optional[Iterable[Habit]] = None):
        self._habits: Dict[str, Habit] = {}
        for habit in habits or []:
            self._habits[habit.id] = habit

    def __iter__(self) -> Iterator[Habit]:
        return iter(list(self._habits.values()))

    def __len__(self) -> int:
        return len(self._habits)

    def __contains__(self, habit_id: str) -> bool:
        return habit_id in self._habits

    def __eq__(self, other) -> bool:
        if not isinstance(other, HabitRegistry):
            return NotImplemented
        return list(self._habits.values()) == list(other._habits.values())

    def copy(self) -> "HabitRegistry":
        return HabitRegistry(self._habits.values())

    def ids(self) -> Set[str]:
        return set(self._habits)

    def names(self) -> List[str]:
        return [habit.name for habit in self._habits.values()]

    def get(self, habit_id: str) -> Optional[Habit]:
        return self._habits.get(habit_id)

    def create(self, draft: HabitDraft) -> Optional[Habit]:
        """Register a new habit; invalid drafts (e.g. blank name) are ignored"""
        try:
            habit = Habit(
                id=make_id(self.ids()),
                name=draft.name,
                description=draft.description,
                icon=draft.icon,
                color=draft.color,
                frequency=draft.frequency,
                type=draft.type,
                goal=draft.goal,
                unit=draft.unit,
                created_at=now_millis()
            )
        except ValidationError as e:
            logger.debug(f"Habit draft rejected: {e}")
            return None

        self._habits[habit.id] = habit
        logger.info(f"Habit created: {habit.name} ({habit.id})")
        return habit

    def create_from_suggestion(self, suggestion: HabitSuggestion) -> Optional[Habit]:
        draft = suggestion.to_draft()
        draft.type = HabitType.CHECK.value
        return self.create(draft)

    def remove(self, habit_id: str) -> Optional[Habit]:
        """Drop the definition only. Use delete_habit to also drop its logs."""
        return self._habits.pop(habit_id, None)

    def to_list(self) -> List[Dict]:
        return [habit.to_dict() for habit in self._habits.values()]

    @classmethod
    def from_list(cls, data: Iterable[Dict]) -> "HabitRegistry":
        return cls(Habit.from_dict(item) for item in data)
