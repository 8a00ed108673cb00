import pytest

from habitflow.core.models import HabitDraft, HabitSuggestion, HabitType
from habitflow.core.registry import HabitRegistry


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_blank_name_is_rejected(name):
    registry = HabitRegistry()
    assert registry.create(HabitDraft(name=name)) is None
    assert len(registry) == 0


def test_create_assigns_unique_ids():
    registry = HabitRegistry()
    first = registry.create(HabitDraft(name="Run"))
    second = registry.create(HabitDraft(name="Read"))

    assert first.id != second.id
    assert first.created_at > 0
    assert [h.name for h in registry] == ["Run", "Read"]


def test_create_strips_name():
    habit = HabitRegistry().create(HabitDraft(name="  Stretch  "))
    assert habit.name == "Stretch"


def test_invalid_goal_is_rejected():
    registry = HabitRegistry()
    assert registry.create(HabitDraft(name="Water", type=HabitType.COUNT.value, goal=0)) is None


def test_check_habits_have_goal_one():
    habit = HabitRegistry().create(HabitDraft(name="Floss", goal=5))
    assert habit.goal == 1


def test_create_from_suggestion():
    registry = HabitRegistry()
    habit = registry.create_from_suggestion(HabitSuggestion(name="Journal", description="Write a page", icon="📝"))

    assert habit.name == "Journal"
    assert habit.icon == "📝"
    assert habit.type == HabitType.CHECK.value
    assert habit.id in registry


def test_copy_is_independent(registry):
    clone = registry.copy()
    clone.remove("h1")
    assert "h1" in registry
    assert "h1" not in clone
