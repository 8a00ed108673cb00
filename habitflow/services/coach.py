# habitflow/services/coach.py

import asyncio
import logging
from typing import List, Optional, Set

from habitflow.core.models import Habit, HabitSuggestion
from habitflow.core.session import HabitSession
from habitflow.services.ai_service import AIService

logger = logging.getLogger(__name__)


class CoachPanel:
    """Display state of the AI coach.

    Requests run as fire-and-forget tasks. Each request takes a generation
    number and its result is applied only if no newer request was started
    meanwhile; older results are dropped. There is no real cancellation.
    """

    def __init__(self, session: HabitSession, ai_service: AIService):
        self.session = session
        self.ai_service = ai_service

        self.advice: str = ""
        self.suggestions: List[HabitSuggestion] = []
        self.advice_loading = False
        self.suggestions_loading = False

        self._advice_generation = 0
        self._suggestions_generation = 0
        self._tasks: Set[asyncio.Task] = set()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def request_advice(self) -> asyncio.Task:
        return self._spawn(self.refresh_advice())

    def request_suggestions(self) -> asyncio.Task:
        return self._spawn(self.refresh_suggestions())

    async def refresh_advice(self) -> bool:
        """Fetch advice; returns False when a newer request superseded this one"""
        self._advice_generation += 1
        generation = self._advice_generation
        self.advice_loading = True

        text = await self.ai_service.generate_advice(
            list(self.session.habits), list(self.session.logs), self.session.profile
        )

        if generation != self._advice_generation:
            logger.debug(f"Dropping stale advice #{generation}")
            return False

        self.advice = text
        self.advice_loading = False
        return True

    async def refresh_suggestions(self) -> bool:
        self._suggestions_generation += 1
        generation = self._suggestions_generation
        self.suggestions_loading = True

        suggestions = await self.ai_service.suggest_habits(list(self.session.habits))

        if generation != self._suggestions_generation:
            logger.debug(f"Dropping stale suggestions #{generation}")
            return False

        self.suggestions = suggestions
        self.suggestions_loading = False
        return True

    def accept_suggestion(self, suggestion: HabitSuggestion) -> Optional[Habit]:
        habit = self.session.add_suggested_habit(suggestion)
        if habit is not None:
            self.suggestions = [s for s in self.suggestions if s is not suggestion]
        return habit

    async def wait_idle(self) -> None:
        """Wait for every in-flight request"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
