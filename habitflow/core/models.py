#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitFlow - Core Data Models
Habits, completion logs and the user profile, with validation

Version: 1.0.0
"""

from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Any, Container, Dict, List, Optional
import logging

from habitflow.utils.datetime_utils import now_millis, parse_key

logger = logging.getLogger(__name__)

# ===== CONSTANTS =====

LEVEL_THRESHOLDS: List[int] = [0, 100, 250, 500, 1000, 2000, 5000]

ICONS: List[str] = ['💧', '📚', '🧘', '🏃', '💪', '🥗', '💤', '🎸', '💻', '🎨', '🧹', '💰', '💊', '🌞', '📝']

COLORS: List[str] = [
    'bg-red-500', 'bg-orange-500', 'bg-amber-500', 'bg-green-500', 'bg-emerald-500',
    'bg-teal-500', 'bg-cyan-500', 'bg-blue-500', 'bg-indigo-500', 'bg-violet-500',
    'bg-purple-500', 'bg-fuchsia-500', 'bg-pink-500', 'bg-rose-500', 'bg-slate-500'
]

# ===== ENUMS =====

class HabitType(Enum):
    """How a habit is completed"""
    CHECK = "check"
    COUNT = "count"
    TIMER = "timer"


class Frequency(Enum):
    """Habit cadence"""
    DAILY = "daily"
    WEEKLY = "weekly"

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Invalid model data"""
    pass


def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Strip and length-check a text field"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must contain at least {min_length} characters")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} must contain at most {max_length} characters")

    return text


def validate_enum_value(value: str, enum_class: type, field_name: str = "value") -> str:
    """Check that value belongs to enum_class"""
    try:
        enum_class(value)
        return value
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} must be one of: {valid_values}")

# ===== CORE MODELS =====

@dataclass
class Habit:
    """Habit definition. Never changed after creation."""
    id: str
    name: str
    icon: str = ICONS[0]
    color: str = COLORS[0]
    description: Optional[str] = None
    frequency: str = Frequency.DAILY.value
    type: str = HabitType.CHECK.value
    goal: int = 1
    unit: str = "times"
    created_at: int = 0  # epoch milliseconds

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=100, field_name="name")

        if self.description is not None:
            self.description = validate_text(self.description, min_length=0, max_length=500, field_name="description")

        self.frequency = validate_enum_value(self.frequency, Frequency, "frequency")
        self.type = validate_enum_value(self.type, HabitType, "type")

        if not isinstance(self.goal, int) or isinstance(self.goal, bool) or self.goal < 1:
            raise ValidationError("goal must be an integer >= 1")

        if self.habit_type is HabitType.CHECK:
            self.goal = 1

    @property
    def habit_type(self) -> HabitType:
        return HabitType(self.type)

    def completion_value(self, amount: Optional[int] = None) -> int:
        """Log magnitude for one completion action.

        Check habits always log 1. Count and timer habits log the explicit
        amount (taps, minutes) or, when none is given, the whole goal.
        """
        if self.habit_type is HabitType.CHECK:
            return 1
        if amount is None:
            return self.goal
        return max(0, int(amount))

    def is_goal_met(self, progress: int) -> bool:
        return progress >= self.goal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        try:
            return cls(
                id=str(data["id"]),
                name=data["name"],
                icon=data.get("icon", ICONS[0]),
                color=data.get("color", COLORS[0]),
                description=data.get("description"),
                frequency=data.get("frequency", Frequency.DAILY.value),
                type=data.get("type", HabitType.CHECK.value),
                goal=int(data.get("goal", 1)),
                unit=data.get("unit", "times"),
                created_at=int(data.get("created_at", data.get("createdAt", 0)))
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Cannot load habit: {e}")


@dataclass
class HabitDraft:
    """User input for a new habit, before an id is assigned"""
    name: str
    description: Optional[str] = None
    icon: str = ICONS[0]
    color: str = COLORS[0]
    frequency: str = Frequency.DAILY.value
    type: str = HabitType.CHECK.value
    goal: int = 1
    unit: str = "times"


@dataclass
class HabitSuggestion:
    """A habit proposed by the AI coach"""
    name: str
    description: str = ""
    icon: str = "✨"

    def to_draft(self) -> HabitDraft:
        return HabitDraft(
            name=self.name,
            description=self.description or None,
            icon=self.icon or ICONS[0]
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class HabitLog:
    """One completion event for a habit on a calendar day"""
    id: str
    habit_id: str
    date: str  # YYYY-MM-DD
    timestamp: int  # epoch milliseconds
    value: int = 1

    def __post_init__(self):
        try:
            parse_key(self.date)
        except (TypeError, ValueError):
            raise ValidationError(f"date must be a YYYY-MM-DD key, got {self.date!r}")

        if self.value < 0:
            raise ValidationError("value must be >= 0")

    @property
    def is_satisfying(self) -> bool:
        return self.value > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HabitLog":
        try:
            return cls(
                id=str(data["id"]),
                habit_id=str(data.get("habit_id", data.get("habitId"))),
                date=data["date"],
                timestamp=int(data.get("timestamp", 0)),
                # older snapshots have no value: a bare log meant "done"
                value=int(data.get("value", 1))
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Cannot load log: {e}")


@dataclass
class UserProfile:
    """Singleton profile of the local user"""
    name: str = "User"
    xp: int = 0
    level: int = 1
    coins: int = 0

    def __post_init__(self):
        self.xp = max(0, self.xp)
        self.level = max(1, self.level)
        self.coins = max(0, self.coins)

    def with_xp(self, xp: int, level: int) -> "UserProfile":
        return replace(self, xp=xp, level=level)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        try:
            return cls(
                name=str(data.get("name", "User")),
                xp=int(data.get("xp", 0)),
                level=int(data.get("level", 1)),
                coins=int(data.get("coins", 0))
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Cannot load profile: {e}")

# ===== IDS =====

def make_id(taken: Container[str] = ()) -> str:
    """Time-derived token, bumped until it is not in `taken`"""
    token = now_millis()
    while str(token) in taken:
        token += 1
    return str(token)

# ===== DEFAULTS =====

def default_habits(created_at: int = 0) -> List[Habit]:
    """Habits a brand-new user starts with"""
    return [
        Habit(
            id='1',
            name='Morning water',
            description='Hydrate and wake the body up',
            icon='💧',
            color='bg-blue-500',
            type=HabitType.COUNT.value,
            goal=4,
            unit='cups',
            created_at=created_at
        ),
        Habit(
            id='2',
            name='Deep reading',
            description='Focused reading, no distractions',
            icon='📚',
            color='bg-indigo-500',
            type=HabitType.TIMER.value,
            goal=30,
            unit='minutes',
            created_at=created_at
        ),
        Habit(
            id='3',
            name='Meditation',
            description='Stay mindful',
            icon='🧘',
            color='bg-purple-500',
            type=HabitType.CHECK.value,
            goal=1,
            unit='times',
            created_at=created_at
        ),
    ]


def default_profile() -> UserProfile:
    return UserProfile()
