"""
Session summary.

Flattens a `SessionRewardResult` into the figures a results screen shows:
box counts per source, level transitions, the combined XP multiplier, the
odds snapshot and what dropped directly. Read-only; nothing is rolled.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

from tomeloot.domain.models import BoxSource, DropKind, SessionRewardResult


@dataclass(frozen=True)
class LootBoxBreakdown:
    total: int
    level_up: int
    completion: int
    bonus_drop: int


@dataclass(frozen=True)
class LevelTransition:
    name: str
    previous: int
    current: int


@dataclass(frozen=True)
class LootBoxOdds:
    luck: float
    rare_luck: float
    legendary_luck: float
    pity_counter: int


@dataclass(frozen=True)
class SessionSummary:
    xp_gained: int
    base_xp: int
    total_boost_multiplier: float
    streak_multiplier: float
    session_minutes: int
    loot_boxes: LootBoxBreakdown
    entity_level: LevelTransition
    player_level: LevelTransition
    category_levels: Tuple[LevelTransition, ...]
    odds: LootBoxOdds
    dropped_consumable_ids: Tuple[str, ...]
    unlocked_collectible_ids: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_session_summary(result: SessionRewardResult, session_seconds: float) -> SessionSummary:
    """
    Build the results-screen summary for one processed session.

    Only categories that gained levels appear in `category_levels`.

    Example:
        >>> summary = build_session_summary(result, 3600)
        >>> summary.loot_boxes.total == len(result.all_loot_boxes)
        True
    """
    boxes = result.all_loot_boxes
    breakdown = LootBoxBreakdown(
        total=len(boxes),
        level_up=sum(1 for box in boxes if box.source is BoxSource.LEVEL_UP),
        completion=sum(1 for box in boxes if box.source is BoxSource.COMPLETION),
        bonus_drop=sum(1 for box in boxes if box.source is BoxSource.BONUS_DROP),
    )

    categories = tuple(
        LevelTransition(
            category,
            result.previous_category_levels.get(category, 0),
            result.previous_category_levels.get(category, 0) + delta,
        )
        for category, delta in result.category_deltas.items()
        if delta > 0
    )

    effects = result.effects
    return SessionSummary(
        xp_gained=result.xp_gained,
        base_xp=result.base_xp,
        total_boost_multiplier=(1 + effects.xp_boost) * result.streak_multiplier,
        streak_multiplier=result.streak_multiplier,
        session_minutes=int(max(0, session_seconds) // 60),
        loot_boxes=breakdown,
        entity_level=LevelTransition(result.entity.id, result.previous_level, result.new_level),
        player_level=LevelTransition(
            "player",
            result.previous_player_level,
            result.new_player_level,
        ),
        category_levels=categories,
        odds=LootBoxOdds(
            luck=effects.luck,
            rare_luck=effects.rare_luck,
            legendary_luck=effects.legendary_luck,
            pity_counter=result.progress.pity_counter,
        ),
        dropped_consumable_ids=tuple(
            drop.consumable.id for drop in result.bonus_drops if drop.kind is DropKind.CONSUMABLE
        ),
        unlocked_collectible_ids=tuple(
            drop.collectible.id for drop in result.bonus_drops if drop.kind is DropKind.COLLECTIBLE
        ),
    )
