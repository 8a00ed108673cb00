# habitflow/core/progression.py

from typing import Sequence

from habitflow.core.models import LEVEL_THRESHOLDS, UserProfile

XP_PER_COMPLETION = 10

# Next-level target shown once the last threshold is passed
MAX_LEVEL_XP = 10000


def level_for_xp(xp: int, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> int:
    """Level L such that thresholds[L-1] <= xp < thresholds[L].

    The top tier is open-ended: xp beyond the last threshold stays on the
    last level.
    """
    level = sum(1 for threshold in thresholds if threshold <= xp)
    return max(1, min(level, len(thresholds)))


def xp_for_level(level: int, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> int:
    """XP needed to reach a level"""
    if level <= 1:
        return 0
    if level > len(thresholds):
        return MAX_LEVEL_XP
    return thresholds[level - 1]


def apply_completion(profile: UserProfile, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> UserProfile:
    xp = profile.xp + XP_PER_COMPLETION
    return profile.with_xp(xp, level_for_xp(xp, thresholds))


def apply_undo(profile: UserProfile, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> UserProfile:
    """Take back one completion. XP never drops below 0 and the level follows the xp down."""
    xp = max(0, profile.xp - XP_PER_COMPLETION)
    return profile.with_xp(xp, level_for_xp(xp, thresholds))


def level_progress(profile: UserProfile, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> float:
    """Progress to the next level (0-100%)"""
    current_level_xp = xp_for_level(profile.level, thresholds)
    next_level_xp = xp_for_level(profile.level + 1, thresholds)

    level_xp_range = next_level_xp - current_level_xp
    if level_xp_range <= 0:
        return 100.0

    percent = (profile.xp - current_level_xp) / level_xp_range * 100
    return min(100.0, max(0.0, percent))


def xp_to_next_level(profile: UserProfile, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> int:
    return max(0, xp_for_level(profile.level + 1, thresholds) - profile.xp)
