"""
Daily streak tracking.

Purpose
-------
Advance the user's reading streak on each session:

- First session ever: streak 1
- Same calendar day as the last session: unchanged
- The next calendar day: streak + 1
- Any longer gap: reset to 1, unless an active streak shield absorbs it

`longest_streak` never decreases. Days are compared as plain calendar
dates, so callers pass `today` in UTC (see `utc_today`).
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import NamedTuple, Optional

from tomeloot.core.logging.logger import get_logger
from tomeloot.domain.models import UserProgress
from tomeloot.modules.shared.formulas import StreakMultiplierInfo, get_streak_multiplier_info

logger = get_logger(__name__)


class StreakUpdate(NamedTuple):
    progress: UserProgress
    shield_consumed: bool


def utc_today(now: Optional[datetime] = None) -> date:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date()


def day_difference(earlier: date, later: date) -> int:
    return (later - earlier).days


def _advance(progress: UserProgress, today: date, streak: int) -> UserProgress:
    return replace(
        progress,
        current_streak=streak,
        longest_streak=max(streak, progress.longest_streak),
        last_session_date=today,
    )


def update_streak(progress: UserProgress, today: date) -> UserProgress:
    """
    Advance the streak for a session on `today`, ignoring shields.

    Example:
        >>> p = UserProgress(current_streak=4, longest_streak=4,
        ...                  last_session_date=date(2024, 1, 1))
        >>> update_streak(p, date(2024, 1, 2)).current_streak
        5
    """
    last = progress.last_session_date
    if last is None:
        return _advance(progress, today, 1)
    if last == today:
        return progress
    if day_difference(last, today) == 1:
        return _advance(progress, today, progress.current_streak + 1)
    return _advance(progress, today, 1)


def update_streak_with_shield(progress: UserProgress, today: date, now: datetime) -> StreakUpdate:
    """
    Advance the streak, letting an active shield cover a missed day.

    A consumed shield keeps the current streak (no increment for the gap)
    and clears the shield expiry.
    """
    last = progress.last_session_date
    if last is None or last == today or day_difference(last, today) == 1:
        return StreakUpdate(update_streak(progress, today), False)

    if progress.shield_active(now):
        logger.info(
            "Streak shield consumed",
            extra={"current_streak": progress.current_streak, "gap_days": day_difference(last, today)},
        )
        shielded = replace(progress, last_session_date=today, streak_shield_expiry=None)
        return StreakUpdate(shielded, True)

    return StreakUpdate(_advance(progress, today, 1), False)


def streak_multiplier_info(streak: int) -> StreakMultiplierInfo:
    """Current XP multiplier, the next tier and the days needed to reach it."""
    return get_streak_multiplier_info(streak)
