"""Daily streak tracking and streak shields."""

from tomeloot.modules.streak.logic import (
    StreakUpdate,
    day_difference,
    streak_multiplier_info,
    update_streak,
    update_streak_with_shield,
    utc_today,
)

__all__ = [
    "StreakUpdate",
    "day_difference",
    "streak_multiplier_info",
    "update_streak",
    "update_streak_with_shield",
    "utc_today",
]
