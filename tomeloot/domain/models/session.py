"""
Result objects returned by the two engine entry points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from tomeloot.domain.models.effects import EffectTotals
from tomeloot.domain.models.enums import BoxTier, DropKind
from tomeloot.domain.models.loot import BonusDrop, LootBoxRecord, RewardResult
from tomeloot.domain.models.progress import TrackedEntity, UserProgress


@dataclass(frozen=True)
class SessionRewardResult:
    """
    Everything one session end produced.

    Attributes
    ----------
    levels_gained : int
        Time, completion and instant levels combined
    completion_levels : int
        Portion of `levels_gained` awarded by the completion floor
    instant_levels : int
        Portion of `levels_gained` from pending instant-level consumables
    new_level / previous_level : int
        Entity level after and before the session
    xp_gained : int
        Player XP after streak multiplier and boosts
    base_xp : int
        XP after the streak multiplier, before boosts
    streak_multiplier : float
        Multiplier applied for the current streak
    previous_player_level / new_player_level : int
        Player level before and after the session, on the configured XP scale
    category_deltas : Dict[str, int]
        Levels gained per entity category, in category order
    previous_category_levels : Dict[str, int]
        Category levels before the session, for every entity category
    loot_boxes : Tuple[LootBoxRecord, ...]
        Level-up and completion boxes earned this session
    bonus_drops : Tuple[BonusDrop, ...]
        Checkpoint drops; loot-box drops carry their own records
    effects : EffectTotals
        Combined modifier and buff totals used for every roll
    entity / progress
        Updated snapshots to persist
    """

    levels_gained: int
    completion_levels: int
    instant_levels: int
    new_level: int
    previous_level: int
    xp_gained: int
    base_xp: int
    streak_multiplier: float
    previous_player_level: int
    new_player_level: int
    category_deltas: Dict[str, int]
    previous_category_levels: Dict[str, int]
    loot_boxes: Tuple[LootBoxRecord, ...]
    bonus_drops: Tuple[BonusDrop, ...]
    effects: EffectTotals
    entity: TrackedEntity
    progress: UserProgress

    @property
    def bonus_loot_boxes(self) -> Tuple[LootBoxRecord, ...]:
        return tuple(
            drop.loot_box
            for drop in self.bonus_drops
            if drop.kind is DropKind.LOOT_BOX and drop.loot_box is not None
        )

    @property
    def all_loot_boxes(self) -> Tuple[LootBoxRecord, ...]:
        """Earned boxes followed by bonus-drop boxes: everything to store."""
        return self.loot_boxes + self.bonus_loot_boxes


@dataclass(frozen=True)
class BoxOpenResult:
    """
    Outcome of opening a stored loot box.

    `box` is the input record with its tier filled in; `progress` carries
    the updated pity counter and any consumed one-shot flags.
    """

    box: LootBoxRecord
    tier: BoxTier
    reward: RewardResult
    progress: UserProgress
    tier_was_rolled: bool
    upgraded_from: Optional[BoxTier] = None
    guaranteed_collectible_used: bool = False
