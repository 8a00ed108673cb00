import pytest

from habitflow.core.log_store import LogStore
from habitflow.core.models import Habit, HabitLog, HabitType, UserProfile
from habitflow.core.registry import HabitRegistry
from habitflow.core.session import HabitSession
from habitflow.services.storage import MemoryStorage
from habitflow.utils.datetime_utils import add_days

# A Wednesday
TODAY = "2025-06-18"


def day(offset: int) -> str:
    """Day key relative to TODAY"""
    return add_days(TODAY, offset)


def make_log(habit_id: str, date: str, value: int = 1, log_id: str = None) -> HabitLog:
    return HabitLog(id=log_id or f"{habit_id}-{date}-{value}", habit_id=habit_id, date=date, timestamp=0, value=value)


@pytest.fixture
def check_habit():
    return Habit(id="h1", name="Meditation", type=HabitType.CHECK.value)


@pytest.fixture
def count_habit():
    return Habit(id="h2", name="Water", type=HabitType.COUNT.value, goal=4, unit="cups")


@pytest.fixture
def timer_habit():
    return Habit(id="h3", name="Reading", type=HabitType.TIMER.value, goal=30, unit="minutes")


@pytest.fixture
def registry(check_habit, count_habit, timer_habit):
    return HabitRegistry([check_habit, count_habit, timer_habit])


@pytest.fixture
def profile():
    return UserProfile(name="Tester")


@pytest.fixture
def empty_logs():
    return LogStore()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session(storage):
    return HabitSession(storage, today=lambda: TODAY)
