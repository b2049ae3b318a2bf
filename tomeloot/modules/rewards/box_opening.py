"""
Loot box opening.

A stored box resolves in four steps:

1. Tier: blank boxes roll through the pity path with the combined luck
   totals; boxes earned with a tier keep it and only advance pity
2. Upgrade: a pending box-upgrade flag bumps the tier one step (capped at
   high) and is cleared
3. Category: a pending guaranteed-collectible flag forces the collectible
   category when the pool has one, and is cleared only then
4. Grade: consumable definition or collectible rarity for the final tier

The pity counter follows the rolled or stored tier; an upgrade to high does
not reset it.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from tomeloot.core.logging.logger import get_logger
from tomeloot.domain.models import BoxOpenResult, BoxTier, LootBoxRecord, Modifier, UserProgress
from tomeloot.modules.consumables.catalog import ConsumableCatalog
from tomeloot.modules.effects.aggregator import resolve_session_effects
from tomeloot.modules.loot.engine import LootEngine

logger = get_logger(__name__)


def open_loot_box(
    box: LootBoxRecord,
    progress: UserProgress,
    equipped_modifiers: Iterable[Modifier],
    scopes: Sequence[str],
    engine: LootEngine,
    catalog: ConsumableCatalog,
    collectible_available: bool = True,
) -> BoxOpenResult:
    """
    Open one stored loot box.

    Args:
        box: The stored record; blank when `tier` is None
        progress: User progress holding pity and the one-shot flags
        equipped_modifiers: Modifiers scoped by `scopes`
        scopes: Categories of the entity the box is opened for
        engine: Loot engine (random source and odds)
        catalog: Consumable catalog for buff lookups
        collectible_available: Whether a collectible can be awarded

    Returns:
        BoxOpenResult with the tiered box, the reward and the new progress
    """
    tier_was_rolled = box.is_blank

    if tier_was_rolled:
        effects = resolve_session_effects(equipped_modifiers, scopes, progress.active_buffs, catalog)
        roll = engine.roll_box_tier_with_pity(
            effects.luck, effects.rare_luck, effects.legendary_luck, progress.pity_counter
        )
        tier, pity_counter = roll.tier, roll.pity_counter
    else:
        tier = box.tier
        pity_counter = 0 if tier is BoxTier.HIGH else progress.pity_counter + 1

    upgraded_from = None
    if progress.pending_box_upgrade:
        upgraded_from = tier
        tier = tier.upgraded()

    force_collectible = progress.pending_guaranteed_collectible and collectible_available
    reward = engine.roll_loot_for_tier(tier, collectible_available, force_collectible)

    next_progress = replace(
        progress,
        pity_counter=pity_counter,
        pending_box_upgrade=False,
        pending_guaranteed_collectible=progress.pending_guaranteed_collectible and not force_collectible,
    )

    logger.info(
        "Loot box opened",
        extra={
            "box_id": box.id,
            "tier": tier.value,
            "category": reward.category.value,
            "tier_was_rolled": tier_was_rolled,
            "upgraded": upgraded_from is not None,
            "pity_counter": pity_counter,
        },
    )

    return BoxOpenResult(
        box=replace(box, tier=tier),
        tier=tier,
        reward=reward,
        progress=next_progress,
        tier_was_rolled=tier_was_rolled,
        upgraded_from=upgraded_from,
        guaranteed_collectible_used=force_collectible,
    )
