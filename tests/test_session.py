import asyncio
import json

import pytest

from habitflow.core.models import HabitDraft, HabitSuggestion, HabitType
from habitflow.core.session import DAILY_QUOTE_KEY, HABITS_KEY, LOGS_KEY, USER_KEY, HabitSession
from habitflow.services.storage import JsonFileStorage, MemoryStorage, StorageError

from tests.conftest import TODAY, day


class FlakyStorage(MemoryStorage):
    """Memory storage whose writes to the listed keys fail"""

    def __init__(self, failing=(), initial=None):
        super().__init__(initial)
        self.failing = set(failing)

    def set(self, key, value):
        if key in self.failing:
            raise StorageError(f"disk full while writing {key}")
        super().set(key, value)


class StubAI:
    def __init__(self, quote="Keep going."):
        self.quote = quote
        self.calls = 0

    async def daily_quote(self):
        self.calls += 1
        return self.quote


def test_fresh_session_uses_defaults(session, storage):
    assert [h.name for h in session.habits] == ["Morning water", "Deep reading", "Meditation"]
    assert len(session.logs) == 0
    assert session.profile.xp == 0
    assert session.profile.level == 1
    # nothing is written until something changes
    assert storage.write_count == 0


def test_corrupt_blobs_fall_back_to_defaults():
    storage = MemoryStorage({
        HABITS_KEY: "{broken",
        LOGS_KEY: json.dumps({"not": "a list"}),
        USER_KEY: json.dumps(["wrong", "shape"]),
    })
    session = HabitSession(storage, today=lambda: TODAY)

    assert len(session.habits) == 3
    assert len(session.logs) == 0
    assert session.profile.xp == 0


def test_old_logs_without_value_load_as_done():
    storage = MemoryStorage({
        HABITS_KEY: json.dumps([{"id": "1", "name": "Read", "createdAt": 1}]),
        LOGS_KEY: json.dumps([{"id": "9", "habitId": "1", "date": TODAY, "timestamp": 5}]),
    })
    session = HabitSession(storage, today=lambda: TODAY)

    assert session.is_completed_today("1")
    assert session.streak("1") == 1


def test_toggle_persists_logs_and_profile(session, storage):
    assert session.toggle("3") is True

    assert json.loads(storage.get(LOGS_KEY))[0]["habit_id"] == "3"
    assert json.loads(storage.get(USER_KEY))["xp"] == 10

    assert session.toggle("3") is False
    assert json.loads(storage.get(LOGS_KEY)) == []
    assert json.loads(storage.get(USER_KEY))["xp"] == 0


def test_toggle_unknown_habit_is_noop(session, storage):
    assert session.toggle("missing") is False
    assert storage.write_count == 0


def test_level_up_through_session(storage):
    storage.set_json(USER_KEY, {"name": "User", "xp": 95, "level": 1, "coins": 0})
    session = HabitSession(storage, today=lambda: TODAY)

    session.toggle("3")
    assert session.profile.xp == 105
    assert session.profile.level == 2
    assert session.level_progress() == 5 / 150 * 100

    session.toggle("3")
    assert session.profile.xp == 95
    assert session.profile.level == 1


def test_count_and_timer_progress(session):
    assert session.record_progress("1", 1) == 1
    assert session.record_progress("1", 2) == 3
    assert session.complete_timer("2", 30) == 30

    assert session.is_completed_today("1")
    assert session.profile.xp == 20


def test_create_and_delete_habit(session, storage):
    assert session.create_habit(HabitDraft(name="  ")) is None

    habit = session.create_habit(HabitDraft(name="Stretch", type=HabitType.COUNT.value, goal=3, unit="sets"))
    session.record_progress(habit.id, 1)
    session.toggle("3")

    assert session.delete_habit(habit.id) is True
    assert habit.id not in session.habits
    assert all(log.habit_id in session.habits for log in session.logs)

    saved_logs = json.loads(storage.get(LOGS_KEY))
    assert [log["habit_id"] for log in saved_logs] == ["3"]
    assert habit.id not in [h["id"] for h in json.loads(storage.get(HABITS_KEY))]

    assert session.delete_habit(habit.id) is False


def test_add_suggested_habit(session):
    habit = session.add_suggested_habit(HabitSuggestion(name="Journal", icon="📝"))
    assert habit.id in session.habits
    assert session.habits.get(habit.id).icon == "📝"


def test_stats_follow_session_state(session):
    session.toggle("3")
    session.record_progress("1", 1)

    today_stat = session.weekly_stats()[-1]
    assert today_stat.date == TODAY
    assert today_stat.completion_rate == 67

    assert session.heatmap(7)[-1].intensity == 2
    assert dict(session.week_completion("3"))[TODAY] is True


def test_snapshot_roundtrip_through_files(tmp_path):
    storage = JsonFileStorage(tmp_path)
    session = HabitSession(storage, today=lambda: TODAY)
    session.create_habit(HabitDraft(name="Run", description="5 km"))
    session.toggle("3")
    session.record_progress("1", 2)

    reloaded = HabitSession(JsonFileStorage(tmp_path), today=lambda: TODAY)

    assert reloaded.snapshot() == session.snapshot()
    assert reloaded.habits == session.habits
    assert reloaded.logs == session.logs
    assert reloaded.profile == session.profile


def test_streak_survives_reload(storage):
    session = HabitSession(storage, today=lambda: day(-1))
    session.toggle("3")

    later = HabitSession(storage, today=lambda: TODAY)
    assert later.streak("3") == 1
    assert later.is_completed_today("3") is False


def test_daily_quote_is_cached_per_day(session, storage):
    ai = StubAI("Small steps.")

    assert asyncio.run(session.daily_quote(ai)) == "Small steps."
    assert asyncio.run(session.daily_quote(ai)) == "Small steps."
    assert ai.calls == 1
    assert json.loads(storage.get(DAILY_QUOTE_KEY)) == {"date": TODAY, "quote": "Small steps."}


def test_daily_quote_refreshes_on_new_day(storage):
    storage.set_json(DAILY_QUOTE_KEY, {"date": day(-1), "quote": "Old one."})
    session = HabitSession(storage, today=lambda: TODAY)
    ai = StubAI("New one.")

    assert asyncio.run(session.daily_quote(ai)) == "New one."
    assert ai.calls == 1


def test_stored_level_is_derived_from_xp():
    # level raised earlier and never lowered after an undo
    storage = MemoryStorage({USER_KEY: json.dumps({"name": "User", "xp": 95, "level": 2, "coins": 0})})
    session = HabitSession(storage, today=lambda: TODAY)

    assert session.profile.xp == 95
    assert session.profile.level == 1
    assert session.level_progress() == pytest.approx(95.0)


def test_log_with_bad_date_falls_back_to_empty_logs():
    storage = MemoryStorage({
        LOGS_KEY: json.dumps([{"id": "9", "habitId": "3", "date": "garbage", "timestamp": 5}]),
    })
    session = HabitSession(storage, today=lambda: TODAY)

    assert len(session.logs) == 0


def test_failed_write_keeps_memory_and_retries():
    storage = FlakyStorage(failing={USER_KEY})
    session = HabitSession(storage, today=lambda: TODAY)

    assert session.toggle("3") is True
    assert session.profile.xp == 10
    assert session.pending_writes == {USER_KEY}
    assert storage.get(USER_KEY) is None

    storage.failing.clear()
    assert session.flush() is True
    assert session.pending_writes == set()

    reloaded = HabitSession(storage, today=lambda: TODAY)
    assert reloaded.is_completed_today("3")
    assert reloaded.profile.xp == 10


def test_pending_write_goes_out_with_next_change():
    storage = FlakyStorage(failing={USER_KEY})
    session = HabitSession(storage, today=lambda: TODAY)
    session.toggle("3")

    storage.failing.clear()
    session.create_habit(HabitDraft(name="Stretch"))

    assert session.pending_writes == set()
    assert json.loads(storage.get(USER_KEY))["xp"] == 10


def test_daily_quote_survives_cache_write_failure():
    storage = FlakyStorage(failing={DAILY_QUOTE_KEY})
    session = HabitSession(storage, today=lambda: TODAY)

    assert asyncio.run(session.daily_quote(StubAI("Still here."))) == "Still here."
    assert storage.get(DAILY_QUOTE_KEY) is None
