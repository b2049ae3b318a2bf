"""
Loot resolution: pure probability tables, the weighted draw and the engine.
"""

from tomeloot.modules.loot.engine import LootBalance, LootEngine
from tomeloot.modules.loot.tables import (
    box_tier_table,
    category_table,
    collectible_rarity_table,
    consumable_tier_table,
    high_tier_share,
    pity_tier_table,
    unified_drop_table,
)
from tomeloot.modules.loot.weighted import RandomSource, weighted_choice

__all__ = [
    "LootBalance",
    "LootEngine",
    "RandomSource",
    "box_tier_table",
    "category_table",
    "collectible_rarity_table",
    "consumable_tier_table",
    "high_tier_share",
    "pity_tier_table",
    "unified_drop_table",
    "weighted_choice",
]
