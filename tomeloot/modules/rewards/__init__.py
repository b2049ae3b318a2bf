"""
Rewards: session-end orchestration, loot box opening and the results summary.
"""

from tomeloot.modules.rewards.box_opening import open_loot_box
from tomeloot.modules.rewards.service import SessionRewardService
from tomeloot.modules.rewards.summary import (
    LevelTransition,
    LootBoxBreakdown,
    LootBoxOdds,
    SessionSummary,
    build_session_summary,
)

__all__ = [
    "LevelTransition",
    "LootBoxBreakdown",
    "LootBoxOdds",
    "SessionRewardService",
    "SessionSummary",
    "build_session_summary",
    "open_loot_box",
]
