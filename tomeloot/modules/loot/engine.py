"""
Loot Resolution Engine.

Purpose
-------
Resolve loot through layered weighted draws:

1. Tier: which grade a blank box becomes (luck-shifted, optionally pity-aware)
2. Category: consumable or collectible, per box tier
3. Grade: consumable potency tier or collectible rarity, per box tier

plus the unified nine-bucket table used by checkpoint bonus drops.

Design Notes
------------
- Tables come from `modules.loot.tables` (pure); this module only draws.
- All randomness flows through the single injected `rng`.
- Balance values live in `LootBalance`, built from the constants or from
  ConfigManager, and are threaded in explicitly.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import AbstractSet, Any, Dict, Mapping, Optional

from tomeloot.core.logging.logger import get_logger
from tomeloot.domain.models import (
    BoxTier,
    CollectibleRarity,
    ConsumableDefinition,
    ConsumableTier,
    DropOutcome,
    PityRoll,
    RewardCategory,
    RewardResult,
)
from tomeloot.modules.consumables.catalog import ConsumableCatalog
from tomeloot.modules.loot import tables
from tomeloot.modules.loot.weighted import RandomSource, weighted_choice
from tomeloot.modules.shared.constants import (
    BOX_TIER_ODDS,
    CATEGORY_ODDS,
    COLLECTIBLE_RARITY_ODDS,
    CONSUMABLE_TIER_ODDS,
    PITY_BONUS_PER_MISS,
    PITY_HARD_CAP,
    UNIFIED_DROP_WEIGHTS,
)
from tomeloot.modules.shared.exceptions import ConfigurationError

logger = get_logger(__name__)

_ODDS_TOLERANCE = 1e-6


@dataclass(frozen=True)
class LootBalance:
    """
    Tunable loot values.

    Every odds row must sum to 1.0; `from_config` enforces it.
    """

    box_tier_odds: Mapping[str, float] = field(default_factory=lambda: dict(BOX_TIER_ODDS))
    category_odds: Mapping[str, Mapping[str, float]] = field(default_factory=lambda: dict(CATEGORY_ODDS))
    consumable_tier_odds: Mapping[str, Mapping[str, float]] = field(
        default_factory=lambda: dict(CONSUMABLE_TIER_ODDS)
    )
    collectible_rarity_odds: Mapping[str, Mapping[str, float]] = field(
        default_factory=lambda: dict(COLLECTIBLE_RARITY_ODDS)
    )
    unified_drop_weights: Mapping[str, Mapping[str, float]] = field(
        default_factory=lambda: dict(UNIFIED_DROP_WEIGHTS)
    )
    pity_bonus_per_miss: float = PITY_BONUS_PER_MISS
    pity_hard_cap: int = PITY_HARD_CAP

    @classmethod
    def from_config(cls, config_manager: Any) -> "LootBalance":
        """
        Read `loot.*` and `pity.*`, falling back to constants per key.

        Raises:
            ConfigurationError: If an odds row does not sum to 1.0
        """
        balance = cls(
            box_tier_odds=config_manager.get("loot.box_tier_odds", BOX_TIER_ODDS),
            category_odds=config_manager.get("loot.category_odds", CATEGORY_ODDS),
            consumable_tier_odds=config_manager.get("loot.consumable_tier_odds", CONSUMABLE_TIER_ODDS),
            collectible_rarity_odds=config_manager.get(
                "loot.collectible_rarity_odds", COLLECTIBLE_RARITY_ODDS
            ),
            unified_drop_weights=config_manager.get("loot.unified_drop_weights", UNIFIED_DROP_WEIGHTS),
            pity_bonus_per_miss=float(config_manager.get("pity.bonus_per_miss", PITY_BONUS_PER_MISS)),
            pity_hard_cap=int(config_manager.get("pity.hard_cap", PITY_HARD_CAP)),
        )
        balance.validate()
        return balance

    def validate(self) -> None:
        _check_row("loot.box_tier_odds", self.box_tier_odds)
        for name, grid in (
            ("loot.category_odds", self.category_odds),
            ("loot.consumable_tier_odds", self.consumable_tier_odds),
            ("loot.collectible_rarity_odds", self.collectible_rarity_odds),
        ):
            for tier in BoxTier:
                if tier.value not in grid:
                    raise ConfigurationError(name, f"'{name}' has no row for tier '{tier.value}'")
                _check_row(f"{name}.{tier.value}", grid[tier.value])

        flattened: Dict[str, float] = {}
        for kind, row in self.unified_drop_weights.items():
            for grade, weight in row.items():
                flattened[f"{kind}.{grade}"] = weight
        _check_row("loot.unified_drop_weights", flattened)

        if self.pity_hard_cap < 1:
            raise ConfigurationError("pity.hard_cap", "pity.hard_cap must be at least 1")


def _check_row(key: str, row: Mapping[str, float]) -> None:
    if any(weight < 0 for weight in row.values()):
        raise ConfigurationError(key, f"'{key}' has a negative weight")
    total = sum(row.values())
    if abs(total - 1.0) > _ODDS_TOLERANCE:
        raise ConfigurationError(key, f"'{key}' sums to {total:.6f}, expected 1.0")


class LootEngine:
    """
    Draws loot against one random source.

    Args:
        rng: Random source; a fresh `random.Random()` when omitted
        catalog: Consumable catalog for concrete consumable picks
        balance: Odds and pity values; constants when omitted
    """

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        catalog: Optional[ConsumableCatalog] = None,
        balance: Optional[LootBalance] = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.catalog = catalog or ConsumableCatalog.default()
        self.balance = balance or LootBalance()

    # =========================================================================
    # LAYER 1: TIER
    # =========================================================================

    def roll_box_tier(self, luck: float = 0.0) -> BoxTier:
        return weighted_choice(tables.box_tier_table(luck, self.balance.box_tier_odds), self.rng)

    def roll_box_tier_with_pity(
        self,
        luck: float = 0.0,
        rare_luck: float = 0.0,
        legendary_luck: float = 0.0,
        pity_counter: int = 0,
    ) -> PityRoll:
        """
        Tier roll with legendary luck and the pity counter.

        When this box would be the `pity_hard_cap`-th miss in a row the high
        tier is granted without drawing. Otherwise a high result resets the
        counter and anything else adds one.

        `rare_luck` is accepted so callers pass the full luck set, but it
        does not change tier odds.
        """
        pity_counter = max(0, pity_counter)

        if pity_counter + 1 >= self.balance.pity_hard_cap:
            logger.debug("Pity guarantee triggered", extra={"pity_counter": pity_counter})
            return PityRoll(BoxTier.HIGH, 0, forced=True)

        table = tables.pity_tier_table(
            luck,
            legendary_luck,
            pity_counter,
            self.balance.box_tier_odds,
            self.balance.pity_bonus_per_miss,
        )
        tier = weighted_choice(table, self.rng)
        new_counter = 0 if tier is BoxTier.HIGH else pity_counter + 1
        return PityRoll(tier, new_counter)

    # =========================================================================
    # LAYERS 2 + 3: CATEGORY AND GRADE
    # =========================================================================

    def roll_category(self, tier: BoxTier, collectible_available: bool = True) -> RewardCategory:
        """Category draw; a collectible result with an empty pool becomes consumable."""
        category = weighted_choice(tables.category_table(tier, self.balance.category_odds), self.rng)
        if category is RewardCategory.COLLECTIBLE and not collectible_available:
            return RewardCategory.CONSUMABLE
        return category

    def roll_consumable_tier(self, tier: BoxTier) -> ConsumableTier:
        return weighted_choice(
            tables.consumable_tier_table(tier, self.balance.consumable_tier_odds), self.rng
        )

    def roll_collectible_rarity(self, tier: BoxTier) -> CollectibleRarity:
        return weighted_choice(
            tables.collectible_rarity_table(tier, self.balance.collectible_rarity_odds), self.rng
        )

    def pick_consumable(self, consumable_tier: ConsumableTier) -> ConsumableDefinition:
        """Uniform pick among catalog entries of one potency tier."""
        candidates = self.catalog.by_tier(consumable_tier)
        index = min(int(self.rng.random() * len(candidates)), len(candidates) - 1)
        return candidates[index]

    def roll_consumable(self, tier: BoxTier) -> ConsumableDefinition:
        return self.pick_consumable(self.roll_consumable_tier(tier))

    def roll_loot_for_tier(
        self,
        tier: BoxTier,
        collectible_available: bool = True,
        force_collectible: bool = False,
    ) -> RewardResult:
        """
        Category and grade for a box whose tier is known.

        `force_collectible` skips the category draw (guaranteed-collectible
        consumable); it only applies when a collectible is available.
        """
        if force_collectible and collectible_available:
            category = RewardCategory.COLLECTIBLE
        else:
            category = self.roll_category(tier, collectible_available)

        if category is RewardCategory.COLLECTIBLE:
            return RewardResult(
                box_tier=tier,
                category=category,
                collectible_rarity=self.roll_collectible_rarity(tier),
            )
        return RewardResult(box_tier=tier, category=category, consumable=self.roll_consumable(tier))

    def roll_loot(self, luck: float = 0.0, collectible_available: bool = True) -> RewardResult:
        """All three layers for a fresh box."""
        return self.roll_loot_for_tier(self.roll_box_tier(luck), collectible_available)

    # =========================================================================
    # UNIFIED BONUS-DROP TABLE
    # =========================================================================

    def roll_unified_drop(
        self, available_rarities: AbstractSet[CollectibleRarity] = frozenset(CollectibleRarity)
    ) -> DropOutcome:
        table = tables.unified_drop_table(available_rarities, self.balance.unified_drop_weights)
        return weighted_choice(table, self.rng)
