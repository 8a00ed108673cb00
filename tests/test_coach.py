import asyncio

from habitflow.core.models import HabitSuggestion
from habitflow.services.coach import CoachPanel


class ScriptedAI:
    """Answers advice requests in the order the test releases them"""

    def __init__(self):
        self.gates = []
        self.suggestions = [HabitSuggestion(name="Journal", icon="📝")]

    async def generate_advice(self, habits, logs, profile):
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        return await gate

    async def suggest_habits(self, existing):
        return list(self.suggestions)


def test_advice_is_applied(session):
    async def scenario():
        ai = ScriptedAI()
        panel = CoachPanel(session, ai)
        task = panel.request_advice()
        await asyncio.sleep(0)
        assert panel.advice_loading is True

        ai.gates[0].set_result("Nice work")
        assert await task is True
        return panel

    panel = asyncio.run(scenario())
    assert panel.advice == "Nice work"
    assert panel.advice_loading is False


def test_stale_advice_is_dropped(session):
    async def scenario():
        ai = ScriptedAI()
        panel = CoachPanel(session, ai)
        first = panel.request_advice()
        await asyncio.sleep(0)
        second = panel.request_advice()
        await asyncio.sleep(0)

        # the newer request finishes first, the older one arrives late
        ai.gates[1].set_result("fresh")
        assert await second is True
        ai.gates[0].set_result("stale")
        assert await first is False
        await panel.wait_idle()
        return panel

    panel = asyncio.run(scenario())
    assert panel.advice == "fresh"


def test_suggestions_and_accepting_one(session):
    async def scenario():
        panel = CoachPanel(session, ScriptedAI())
        await panel.refresh_suggestions()
        return panel

    panel = asyncio.run(scenario())
    assert [s.name for s in panel.suggestions] == ["Journal"]

    habit = panel.accept_suggestion(panel.suggestions[0])
    assert habit.id in session.habits
    assert panel.suggestions == []
