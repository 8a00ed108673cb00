#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitFlow - AI Coach Service
Advice, habit suggestions and the daily quote via OpenAI, with fixed fallbacks

Version: 1.0.0
"""

import asyncio
import json
import random
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
import logging

import openai
from openai import AsyncOpenAI

from habitflow.config import AIConfig, config
from habitflow.core.models import Habit, HabitLog, HabitSuggestion, UserProfile
from habitflow.utils.datetime_utils import add_days, today_key

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3

# ===== EXCEPTIONS =====

class AIServiceError(Exception):
    """Base AI service error"""
    pass


class AIProviderError(AIServiceError):
    """The provider call failed"""
    pass


class AIResponseError(AIServiceError):
    """The provider answered with something unusable"""
    pass

# ===== ENUMS =====

class PromptTemplate(Enum):
    ADVICE = "advice"
    SUGGESTIONS = "suggestions"
    DAILY_QUOTE = "daily_quote"

# ===== DATA CLASSES =====

@dataclass
class AIStats:
    """Usage counters of the AI service"""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    fallback_responses: int = 0
    total_tokens_used: int = 0
    requests_by_type: Dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_requests': self.total_requests,
            'successful_requests': self.successful_requests,
            'failed_requests': self.failed_requests,
            'fallback_responses': self.fallback_responses,
            'total_tokens_used': self.total_tokens_used,
            'success_rate': round(self.success_rate, 2),
            'requests_by_type': self.requests_by_type
        }

# ===== PROMPTS =====

class PromptManager:
    """Prompt templates"""

    def __init__(self):
        self.templates = self._load_templates()

    def _load_templates(self) -> Dict[PromptTemplate, str]:
        return {
            PromptTemplate.ADVICE: """You are an energetic, upbeat personal growth coach. Based on the user's habit data below, write a short, personal and encouraging piece of advice (no more than 100 words).

User profile:
- Current level: {level}
- Total XP: {xp}

Habits: {habit_names}

Overview:
- Total check-ins: {total_logs}
- Check-ins in the last 7 days: {recent_logs}

Praise progress, gently encourage when things have stalled. You may quote a short saying.
Do not use Markdown, answer in plain text.""",

            PromptTemplate.SUGGESTIONS: """The user is currently building these habits: {habit_names}.
Suggest {count} NEW habits that would complement or balance the user's life.
For example, if the user has many workout habits, suggest reading or meditation.

Answer strictly with a JSON object of this shape and nothing else:
{{"habits": [{{"name": "Habit name", "description": "Short description", "icon": "single emoji"}}]}}""",

            PromptTemplate.DAILY_QUOTE: """Give one short, uplifting quote about habits, discipline or personal growth (one sentence, under 30 words).
Answer with the quote text only, no quotation marks and no Markdown."""
        }

    def get_prompt(self, template: PromptTemplate, **kwargs) -> str:
        return self.templates[template].format(**kwargs)


class ContextBuilder:
    """Turns the session state into prompt variables"""

    @staticmethod
    def build_advice_context(habits: Iterable[Habit], logs: Iterable[HabitLog], profile: UserProfile) -> Dict[str, Any]:
        logs = list(logs)
        week_ago = add_days(today_key(), -7)
        recent = [log for log in logs if log.date >= week_ago]
        names = [habit.name for habit in habits]
        return {
            'level': profile.level,
            'xp': profile.xp,
            'habit_names': ", ".join(names) or "none yet",
            'total_logs': len(logs),
            'recent_logs': len(recent)
        }


class FallbackResponseProvider:
    """Fixed texts used when the AI is unavailable"""

    NO_CREDENTIALS = "Please configure an API key to use the AI coach."
    EMPTY_RESPONSE = "Keep it up! Every step counts."
    UNAVAILABLE = (
        "The AI coach can't be reached right now, please try again later. "
        "But remember: persistence is victory!"
    )

    QUOTES = [
        "We are what we repeatedly do. Excellence, then, is not an act, but a habit.",
        "Small steps every day add up to big results.",
        "A journey of a thousand miles begins with a single step.",
        "Motivation gets you going, habit keeps you going.",
        "Success is the sum of small efforts, repeated day in and day out.",
    ]

    def get_quote(self) -> str:
        return random.choice(self.QUOTES)

# ===== MAIN AI SERVICE =====

class AIService:
    """Text-generation collaborator. Never raises to its callers."""

    def __init__(self, client: Optional[Any] = None, ai_config: Optional[AIConfig] = None):
        self.ai_config = ai_config or config.ai
        self.openai_client = client
        self.enabled = client is not None or self._initialize_openai()

        self.prompt_manager = PromptManager()
        self.context_builder = ContextBuilder()
        self.fallback_provider = FallbackResponseProvider()
        self.stats = AIStats()

        self.max_retries = 3
        self.retry_delay = 1.0

        logger.info(f"AI Service initialized - OpenAI: {'✅' if self.enabled else '❌'}")

    def _initialize_openai(self) -> bool:
        if not self.ai_config.ai_enabled:
            logger.info("AI disabled by configuration")
            return False

        if not self.ai_config.openai_api_key:
            logger.warning("OpenAI API key not configured")
            return False

        try:
            self.openai_client = AsyncOpenAI(
                api_key=self.ai_config.openai_api_key,
                timeout=self.ai_config.request_timeout
            )
            logger.info("OpenAI client initialized successfully")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize OpenAI client: {e}")
            return False

    async def _complete(self, prompt: str, template: PromptTemplate, json_mode: bool = False,
                        temperature: float = 0.7) -> str:
        """One chat completion with retries on rate limits and timeouts"""
        self.stats.total_requests += 1
        self.stats.requests_by_type[template.value] = self.stats.requests_by_type.get(template.value, 0) + 1

        kwargs: Dict[str, Any] = {
            'model': self.ai_config.openai_model,
            'messages': [{"role": "user", "content": prompt}],
            'max_tokens': self.ai_config.openai_max_tokens,
            'temperature': temperature,
        }
        if json_mode:
            kwargs['response_format'] = {"type": "json_object"}

        for attempt in range(self.max_retries):
            try:
                start_time = time.time()
                response = await self.openai_client.chat.completions.create(**kwargs)
                content = (response.choices[0].message.content or "").strip()

                usage = getattr(response, 'usage', None)
                self.stats.total_tokens_used += getattr(usage, 'total_tokens', 0) or 0
                self.stats.successful_requests += 1
                logger.debug(f"OpenAI {template.value} answered in {int((time.time() - start_time) * 1000)} ms")
                return content

            except (openai.RateLimitError, openai.APITimeoutError) as e:
                logger.warning(f"OpenAI {type(e).__name__}, attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay * (2 ** attempt))
                    continue
                self.stats.failed_requests += 1
                raise AIProviderError(f"OpenAI unavailable: {e}")

            except Exception as e:
                self.stats.failed_requests += 1
                raise AIProviderError(f"OpenAI API failed: {e}")

        raise AIProviderError("No attempts made")

    async def generate_advice(self, habits: Iterable[Habit], logs: Iterable[HabitLog], profile: UserProfile) -> str:
        """Short encouraging advice for the current state"""
        if not self.enabled:
            self.stats.fallback_responses += 1
            return self.fallback_provider.NO_CREDENTIALS

        context = self.context_builder.build_advice_context(habits, logs, profile)
        prompt = self.prompt_manager.get_prompt(PromptTemplate.ADVICE, **context)

        try:
            content = await self._complete(prompt, PromptTemplate.ADVICE)
        except AIServiceError as e:
            logger.error(f"AI advice failed: {e}")
            self.stats.fallback_responses += 1
            return self.fallback_provider.UNAVAILABLE

        return content or self.fallback_provider.EMPTY_RESPONSE

    async def suggest_habits(self, existing: Iterable[Habit]) -> List[HabitSuggestion]:
        """New habit ideas not yet in `existing`; empty list on any failure"""
        if not self.enabled:
            return []

        existing = list(existing)
        prompt = self.prompt_manager.get_prompt(
            PromptTemplate.SUGGESTIONS,
            habit_names=", ".join(habit.name for habit in existing) or "none yet",
            count=MAX_SUGGESTIONS
        )

        try:
            content = await self._complete(prompt, PromptTemplate.SUGGESTIONS, json_mode=True, temperature=0.8)
            suggestions = parse_suggestions(content)
        except AIServiceError as e:
            logger.error(f"AI habit suggestion failed: {e}")
            return []

        taken = {habit.name.strip().lower() for habit in existing}
        fresh = []
        for suggestion in suggestions:
            key = suggestion.name.strip().lower()
            if key in taken:
                continue
            taken.add(key)
            fresh.append(suggestion)
        return fresh[:MAX_SUGGESTIONS]

    async def daily_quote(self) -> str:
        if not self.enabled:
            return self.fallback_provider.get_quote()

        prompt = self.prompt_manager.get_prompt(PromptTemplate.DAILY_QUOTE)
        try:
            content = await self._complete(prompt, PromptTemplate.DAILY_QUOTE, temperature=0.9)
        except AIServiceError as e:
            logger.error(f"AI daily quote failed: {e}")
            content = ""

        return content.strip('"“” ') or self.fallback_provider.get_quote()

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.to_dict()


def parse_suggestions(content: str) -> List[HabitSuggestion]:
    """Decode the JSON answer of a suggestion request.

    Accepts a bare array or an object with a "habits" array, optionally
    wrapped in a Markdown code fence. Items without a name are skipped.
    """
    text = re.sub(r"^```(?:json)?\s*|\s*```$", "", (content or "").strip())
    if not text:
        return []

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AIResponseError(f"Suggestion answer is not JSON: {e}")

    if isinstance(data, dict):
        data = data.get("habits", [])
    if not isinstance(data, list):
        raise AIResponseError("Suggestion answer is not a list")

    suggestions = []
    for item in data:
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        if not name or len(name) > 100:
            continue
        suggestions.append(HabitSuggestion(
            name=name,
            description=str(item.get("description") or "").strip(),
            icon=str(item.get("icon") or "✨").strip()
        ))
    return suggestions


__all__ = [
    'AIServiceError',
    'AIProviderError',
    'AIResponseError',
    'PromptTemplate',
    'AIStats',
    'PromptManager',
    'ContextBuilder',
    'FallbackResponseProvider',
    'AIService',
    'parse_suggestions'
]
