#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitFlow - Session
The single owner of habits, logs and the user profile.

State is read from the injected storage once, when the session is created,
and each collection is written back in full whenever it changes. Memory is
the source of truth: a collection whose write fails stays pending and is
written again on the next change or on flush().
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from habitflow.core import completion, progression, statistics, streaks
from habitflow.core.log_store import LogStore
from habitflow.core.models import (
    Habit, HabitDraft, HabitSuggestion, UserProfile, ValidationError,
    default_habits, default_profile
)
from habitflow.core.registry import HabitRegistry
from habitflow.services.storage import KeyValueStorage, StorageError
from habitflow.utils.datetime_utils import now_millis, today_key

logger = logging.getLogger(__name__)

HABITS_KEY = "habits"
LOGS_KEY = "logs"
USER_KEY = "user"
DAILY_QUOTE_KEY = "dailyQuoteData"


class HabitSession:
    """Session state of the local user"""

    def __init__(self, storage: KeyValueStorage, today: Callable[[], str] = today_key):
        self.storage = storage
        self._today = today

        self.habits: HabitRegistry = self._load(
            HABITS_KEY, HabitRegistry.from_list, lambda: HabitRegistry(default_habits(now_millis()))
        )
        self.logs: LogStore = self._load(LOGS_KEY, LogStore.from_list, LogStore)
        self.profile: UserProfile = self._load(USER_KEY, _parse_profile, default_profile)
        self._pending: Set[str] = set()

        logger.info(f"Session loaded: {len(self.habits)} habits, {len(self.logs)} logs, "
                    f"level {self.profile.level} ({self.profile.xp} XP)")

    # ===== PERSISTENCE =====

    def _load(self, key: str, parse: Callable[[Any], Any], default: Callable[[], Any]) -> Any:
        """Parse one blob; absent or broken data falls back to the default"""
        try:
            data = self.storage.get_json(key)
        except StorageError as e:
            logger.warning(f"Cannot read '{key}', using defaults: {e}")
            return default()

        if data is None:
            return default()

        try:
            return parse(data)
        except (ValidationError, AttributeError, TypeError) as e:
            logger.warning(f"Stored '{key}' is malformed, using defaults: {e}")
            return default()

    def _persist(self, *keys: str) -> None:
        """Write the given collections plus any still pending from a failed write"""
        self._pending.update(keys)
        blobs = self.snapshot()

        for key in (HABITS_KEY, LOGS_KEY, USER_KEY):
            if key not in self._pending:
                continue
            try:
                self.storage.set_json(key, blobs[key])
            except StorageError as e:
                logger.error(f"Failed to save '{key}', will retry on next change: {e}")
            else:
                self._pending.discard(key)

    def flush(self) -> bool:
        """Retry pending writes; returns True when storage is up to date"""
        self._persist()
        return not self._pending

    @property
    def pending_writes(self) -> Set[str]:
        return set(self._pending)

    def snapshot(self) -> Dict[str, Any]:
        return {
            HABITS_KEY: self.habits.to_list(),
            LOGS_KEY: self.logs.to_list(),
            USER_KEY: self.profile.to_dict()
        }

    # ===== ACTIONS =====

    @property
    def today(self) -> str:
        return self._today()

    def create_habit(self, draft: HabitDraft) -> Optional[Habit]:
        registry = self.habits.copy()
        habit = registry.create(draft)
        if habit is None:
            return None

        self.habits = registry
        self._persist(HABITS_KEY)
        return habit

    def add_suggested_habit(self, suggestion: HabitSuggestion) -> Optional[Habit]:
        registry = self.habits.copy()
        habit = registry.create_from_suggestion(suggestion)
        if habit is None:
            return None

        self.habits = registry
        self._persist(HABITS_KEY)
        return habit

    def delete_habit(self, habit_id: str) -> bool:
        if habit_id not in self.habits:
            return False

        self.habits, self.logs = completion.delete_habit(habit_id, self.habits, self.logs)
        self._persist(HABITS_KEY, LOGS_KEY)
        return True

    def toggle(self, habit_id: str, amount: Optional[int] = None) -> bool:
        """Complete or undo today's entry; returns whether the habit is now done today"""
        habit = self.habits.get(habit_id)
        if habit is None:
            logger.warning(f"Toggle for unknown habit {habit_id}")
            return False

        self._apply(completion.toggle(habit, self.logs, self.profile, self.today, amount))
        return self.is_completed_today(habit_id)

    def record_progress(self, habit_id: str, amount: int) -> int:
        """Add an increment for today; returns today's total for the habit"""
        habit = self.habits.get(habit_id)
        if habit is None:
            logger.warning(f"Progress for unknown habit {habit_id}")
            return 0

        self._apply(completion.record_progress(habit, self.logs, self.profile, self.today, amount))
        return self.progress_today(habit_id)

    def complete_timer(self, habit_id: str, minutes: int) -> int:
        return self.record_progress(habit_id, minutes)

    def _apply(self, result: Tuple[LogStore, UserProfile]) -> None:
        logs, profile = result
        old_level = self.profile.level

        changed = []
        if logs is not self.logs:
            changed.append(LOGS_KEY)
        if profile != self.profile:
            changed.append(USER_KEY)
        self.logs, self.profile = logs, profile

        self._persist(*changed)
        if profile.level > old_level:
            logger.info(f"Level up: {old_level} -> {profile.level}")

    # ===== DERIVED STATE =====

    def is_completed_today(self, habit_id: str) -> bool:
        return self.logs.is_satisfied(habit_id, self.today)

    def progress_today(self, habit_id: str) -> int:
        return statistics.progress_on(habit_id, self.logs, self.today)

    def streak(self, habit_id: str) -> int:
        return streaks.current_streak(habit_id, self.logs, self.today)

    def week_completion(self, habit_id: str) -> List[Tuple[str, bool]]:
        return statistics.week_completion(habit_id, self.logs, self.today)

    def weekly_stats(self) -> List[statistics.DayStat]:
        return statistics.weekly_stats(self.logs, len(self.habits), self.today)

    def heatmap(self, window_days: int = statistics.HEATMAP_DAYS) -> List[statistics.HeatmapCell]:
        return statistics.heatmap(self.logs, window_days, self.today)

    def level_progress(self) -> float:
        return progression.level_progress(self.profile)

    def xp_to_next_level(self) -> int:
        return progression.xp_to_next_level(self.profile)

    # ===== DAILY QUOTE =====

    async def daily_quote(self, ai_service) -> str:
        """Quote of the day, fetched at most once per calendar day"""
        today = self.today
        try:
            cached = self.storage.get_json(DAILY_QUOTE_KEY)
        except StorageError as e:
            logger.warning(f"Daily quote cache unreadable: {e}")
            cached = None

        if isinstance(cached, dict) and cached.get("date") == today and cached.get("quote"):
            return cached["quote"]

        quote = await ai_service.daily_quote()
        try:
            self.storage.set_json(DAILY_QUOTE_KEY, {"date": today, "quote": quote})
        except StorageError as e:
            logger.warning(f"Daily quote not cached: {e}")
        return quote


def _parse_profile(data: Dict[str, Any]) -> UserProfile:
    """Load the profile with its level derived from xp"""
    profile = UserProfile.from_dict(data)
    level = progression.level_for_xp(profile.xp)
    if level != profile.level:
        logger.warning(f"Stored level {profile.level} does not match {profile.xp} XP, using level {level}")
        profile = profile.with_xp(profile.xp, level)
    return profile
