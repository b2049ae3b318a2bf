"""
TomeLoot Progression Formulas

Purpose
-------
Pure calculation functions for the progression side of the reward economy:
time-based entity leveling, the completion floor, category level
distribution, streak multipliers, session XP and player level.

Design Notes
------------
All formulas:
- Accept parameters explicitly (balance values default to the constants)
- Return calculated values
- Have no side effects and no config access
- Clamp negative time and size inputs to zero rather than raising

Usage
-----
    from tomeloot.modules.shared.formulas import process_time

    change = process_time(previous_total_seconds=3000, session_seconds=1200)
    change.levels_gained  # 1
"""

from __future__ import annotations

import math
from typing import Dict, NamedTuple, Optional, Sequence, Tuple

from tomeloot.modules.shared.constants import (
    BASE_STREAK_MULTIPLIER,
    SECONDS_PER_LEVEL,
    STREAK_MULTIPLIER_TIERS,
    UNITS_PER_LEVEL,
    XP_PER_MINUTE,
    XP_PER_PLAYER_LEVEL,
)


class LevelChange(NamedTuple):
    previous_level: int
    new_level: int
    levels_gained: int


class StreakMultiplierInfo(NamedTuple):
    current: float
    next: Optional[float]
    days_to_next: Optional[int]


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Python's built-in `round` uses banker's rounding; XP must not flip
    between 2.5 -> 2 and 3.5 -> 4.

    Example:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(779.9999999)
        780
    """
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


# ============================================================================
# ENTITY LEVELING
# ============================================================================


def calculate_level(total_seconds: float, seconds_per_level: int = SECONDS_PER_LEVEL) -> int:
    """
    Calculate the time-derived entity level.

    Args:
        total_seconds: Accumulated session time
        seconds_per_level: Seconds needed per level

    Returns:
        `floor(total_seconds / seconds_per_level)`, never below 0

    Example:
        >>> calculate_level(7199)
        1
        >>> calculate_level(7200)
        2
    """
    if total_seconds <= 0:
        return 0
    return int(total_seconds // seconds_per_level)


def calculate_size_floor(size: Optional[int], units_per_level: int = UNITS_PER_LEVEL) -> int:
    """
    Calculate the level a completed entity is guaranteed to reach.

    Example:
        >>> calculate_size_floor(300)
        10
        >>> calculate_size_floor(None)
        0
    """
    if size is None or size <= 0:
        return 0
    return int(size // units_per_level)


def process_time(
    previous_total_seconds: float,
    session_seconds: float,
    seconds_per_level: int = SECONDS_PER_LEVEL,
) -> LevelChange:
    """
    Apply a session's time to an entity's accumulated time.

    Args:
        previous_total_seconds: Time logged before the session
        session_seconds: Session length; negative values count as 0

    Returns:
        LevelChange with previous level, new level and levels gained

    Example:
        >>> process_time(3000, 1200)
        LevelChange(previous_level=0, new_level=1, levels_gained=1)
    """
    session_seconds = max(0, session_seconds)
    previous_level = calculate_level(previous_total_seconds, seconds_per_level)
    new_level = calculate_level(previous_total_seconds + session_seconds, seconds_per_level)
    return LevelChange(previous_level, new_level, new_level - previous_level)


def calculate_completion_bonus(
    total_seconds_after_session: float,
    size: Optional[int],
    seconds_per_level: int = SECONDS_PER_LEVEL,
    units_per_level: int = UNITS_PER_LEVEL,
) -> int:
    """
    Levels needed to lift a completed entity to its size floor.

    Zero when time-based leveling already meets or exceeds the floor.

    Example:
        >>> calculate_completion_bonus(4 * 3600, 300)
        6
        >>> calculate_completion_bonus(12 * 3600, 300)
        0
    """
    floor_level = calculate_size_floor(size, units_per_level)
    current_level = calculate_level(total_seconds_after_session, seconds_per_level)
    return max(0, floor_level - current_level)


def distribute_levels(levels_gained: int, categories: Sequence[str]) -> Dict[str, int]:
    """
    Split level gains across categories.

    Every category gets the floor share; the first `levels_gained % N`
    categories (input order) get one extra, so the values always sum to
    `levels_gained`.

    Example:
        >>> distribute_levels(2, ["fantasy", "mystery", "history"])
        {'fantasy': 1, 'mystery': 1, 'history': 0}
        >>> distribute_levels(3, [])
        {}
    """
    if not categories:
        return {}

    levels_gained = max(0, levels_gained)
    base, remainder = divmod(levels_gained, len(categories))
    return {
        category: base + (1 if index < remainder else 0)
        for index, category in enumerate(categories)
    }


# ============================================================================
# XP
# ============================================================================


def get_streak_multiplier(streak: int) -> float:
    """
    XP multiplier for the current daily streak.

    Example:
        >>> get_streak_multiplier(2)
        1.0
        >>> get_streak_multiplier(3)
        1.2
        >>> get_streak_multiplier(7)
        1.5
    """
    for threshold, multiplier in STREAK_MULTIPLIER_TIERS:
        if streak >= threshold:
            return multiplier
    return BASE_STREAK_MULTIPLIER


def get_streak_multiplier_info(streak: int) -> StreakMultiplierInfo:
    """
    Current multiplier plus the next tier and days needed to reach it.

    Example:
        >>> get_streak_multiplier_info(1)
        StreakMultiplierInfo(current=1.0, next=1.2, days_to_next=2)
        >>> get_streak_multiplier_info(9)
        StreakMultiplierInfo(current=1.5, next=None, days_to_next=None)
    """
    current = get_streak_multiplier(streak)
    # Tiers are stored highest first; walk lowest first to find the next one
    for threshold, multiplier in reversed(STREAK_MULTIPLIER_TIERS):
        if streak < threshold:
            return StreakMultiplierInfo(current, multiplier, threshold - streak)
    return StreakMultiplierInfo(current, None, None)


def calculate_session_xp(
    session_minutes: float,
    streak_multiplier: float = BASE_STREAK_MULTIPLIER,
    xp_boost: float = 0.0,
    xp_per_minute: int = XP_PER_MINUTE,
) -> Tuple[int, int]:
    """
    Calculate XP for a session.

    The streak multiplier applies to the base rate first; XP boosts apply
    multiplicatively on top of the rounded streak-adjusted value.

    Args:
        session_minutes: Session length in minutes (fractional allowed)
        streak_multiplier: From `get_streak_multiplier`
        xp_boost: Summed XP boost magnitude (0.2 = +20%)

    Returns:
        (base_xp, total_xp)

    Example:
        >>> calculate_session_xp(60)
        (600, 600)
        >>> calculate_session_xp(60, 1.2, 0.2)
        (720, 864)
    """
    if session_minutes <= 0:
        return 0, 0

    base_xp = round_half_up(session_minutes * xp_per_minute * streak_multiplier)
    total_xp = round_half_up(base_xp * (1 + max(0.0, xp_boost)))
    return base_xp, total_xp


def calculate_player_level(total_xp: int, xp_per_level: int = XP_PER_PLAYER_LEVEL) -> int:
    """
    Player level from lifetime XP (level 1 at 0 XP).

    Example:
        >>> calculate_player_level(0)
        1
        >>> calculate_player_level(2500)
        3
    """
    return max(0, total_xp) // xp_per_level + 1


def xp_progress(total_xp: int, xp_per_level: int = XP_PER_PLAYER_LEVEL) -> Tuple[int, int]:
    """
    XP earned inside the current player level and XP needed for it.

    Example:
        >>> xp_progress(2500)
        (500, 1000)
    """
    return max(0, total_xp) % xp_per_level, xp_per_level
