"""
Loot probability tables.

Pure, deterministic builders for every weighted table the loot engine
draws from. Each builder returns an ordered tuple of `(outcome, weight)`
pairs; the order is part of the contract because `weighted_choice`
subtracts weights in sequence. No randomness lives here, so every table
can be checked directly (weights sum to 1.0, excluded grades are 0).

Odds mappings default to `modules.shared.constants` and may be replaced
with values read from config.
"""

from __future__ import annotations

from typing import AbstractSet, Mapping, Tuple, TypeVar

from tomeloot.domain.models import (
    BoxTier,
    CollectibleRarity,
    ConsumableTier,
    DropKind,
    DropOutcome,
    RewardCategory,
)
from tomeloot.modules.shared.constants import (
    BOX_TIER_ODDS,
    CATEGORY_ODDS,
    COLLECTIBLE_RARITY_ODDS,
    CONSUMABLE_TIER_ODDS,
    LEGENDARY_LUCK_WEIGHT,
    PITY_BONUS_PER_MISS,
    UNIFIED_DROP_WEIGHTS,
)

T = TypeVar("T")
Table = Tuple[Tuple[T, float], ...]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def table_total(table: Table) -> float:
    return sum(weight for _, weight in table)


# ============================================================================
# BOX TIER
# ============================================================================


def box_tier_table(luck: float = 0.0, odds: Mapping[str, float] = BOX_TIER_ODDS) -> Table:
    """
    Tier odds for a blank box, shifted by luck.

    Luck (clamped to [0, 1]) removes `low * luck` from the low tier and
    hands it to mid and high in their base ratio (25:5).

    Example:
        >>> box_tier_table(0.0)
        ((<BoxTier.LOW: 'low'>, 0.7), (<BoxTier.MID: 'mid'>, 0.25), (<BoxTier.HIGH: 'high'>, 0.05))
        >>> [round(w, 4) for _, w in box_tier_table(1.0)]
        [0.0, 0.8333, 0.1667]
    """
    boost = clamp(luck)
    low, mid, high = odds["low"], odds["mid"], odds["high"]
    decrease = low * boost
    upper = mid + high

    return (
        (BoxTier.LOW, low - decrease),
        (BoxTier.MID, mid + decrease * (mid / upper)),
        (BoxTier.HIGH, high + decrease * (high / upper)),
    )


def high_tier_share(
    legendary_luck: float,
    pity_counter: int,
    odds: Mapping[str, float] = BOX_TIER_ODDS,
    pity_bonus_per_miss: float = PITY_BONUS_PER_MISS,
) -> float:
    """
    High tier's share of the non-low mass, capped at 1.0.

    Example:
        >>> round(high_tier_share(0.0, 0), 4)
        0.1667
        >>> high_tier_share(0.0, 30)
        1.0
    """
    base_share = odds["high"] / (odds["mid"] + odds["high"])
    share = (
        base_share * (1 + max(0.0, legendary_luck) * LEGENDARY_LUCK_WEIGHT)
        + max(0, pity_counter) * pity_bonus_per_miss
    )
    return min(1.0, share)


def pity_tier_table(
    luck: float = 0.0,
    legendary_luck: float = 0.0,
    pity_counter: int = 0,
    odds: Mapping[str, float] = BOX_TIER_ODDS,
    pity_bonus_per_miss: float = PITY_BONUS_PER_MISS,
) -> Table:
    """
    Tier odds for the pity-aware roll, ordered high, mid, low.

    The low tier keeps `low * (1 - luck)`; the rest splits between high and
    mid by `high_tier_share`.

    Example:
        >>> [(t.value, round(w, 4)) for t, w in pity_tier_table()]
        [('high', 0.05), ('mid', 0.25), ('low', 0.7)]
    """
    low = odds["low"] * (1 - clamp(luck))
    rest = 1.0 - low
    share = high_tier_share(legendary_luck, pity_counter, odds, pity_bonus_per_miss)

    return (
        (BoxTier.HIGH, rest * share),
        (BoxTier.MID, rest * (1 - share)),
        (BoxTier.LOW, low),
    )


# ============================================================================
# CATEGORY / GRADE
# ============================================================================


def category_table(
    tier: BoxTier, odds: Mapping[str, Mapping[str, float]] = CATEGORY_ODDS
) -> Table:
    row = odds[BoxTier(tier).value]
    return tuple((category, row[category.value]) for category in RewardCategory)


def consumable_tier_table(
    tier: BoxTier, odds: Mapping[str, Mapping[str, float]] = CONSUMABLE_TIER_ODDS
) -> Table:
    row = odds[BoxTier(tier).value]
    return tuple((grade, row[grade.value]) for grade in ConsumableTier)


def collectible_rarity_table(
    tier: BoxTier, odds: Mapping[str, Mapping[str, float]] = COLLECTIBLE_RARITY_ODDS
) -> Table:
    row = odds[BoxTier(tier).value]
    return tuple((rarity, row[rarity.value]) for rarity in CollectibleRarity)


# ============================================================================
# UNIFIED BONUS-DROP TABLE
# ============================================================================


def unified_drop_table(
    available_rarities: AbstractSet[CollectibleRarity] = frozenset(CollectibleRarity),
    weights: Mapping[str, Mapping[str, float]] = UNIFIED_DROP_WEIGHTS,
) -> Table:
    """
    Nine-bucket checkpoint drop table.

    Collectible rarities missing from `available_rarities` get weight 0;
    their weight is spread over the six consumable and loot-box buckets in
    proportion to those buckets' own weights, so the total is unchanged.

    Example:
        >>> table = unified_drop_table(frozenset())
        >>> round(sum(w for _, w in table), 6)
        1.0
    """
    consumables = [
        (DropOutcome(DropKind.CONSUMABLE, consumable_tier=grade), weights["consumable"][grade.value])
        for grade in ConsumableTier
    ]
    boxes = [
        (DropOutcome(DropKind.LOOT_BOX, box_tier=tier), weights["loot_box"][tier.value])
        for tier in BoxTier
    ]
    collectibles = [
        (
            DropOutcome(DropKind.COLLECTIBLE, rarity=rarity),
            weights["collectible"][rarity.value] if rarity in available_rarities else 0.0,
        )
        for rarity in CollectibleRarity
    ]

    removed = sum(weights["collectible"].values()) - sum(w for _, w in collectibles)
    fixed = consumables + boxes
    fixed_total = sum(w for _, w in fixed)

    if removed > 0 and fixed_total > 0:
        fixed = [(outcome, w + removed * (w / fixed_total)) for outcome, w in fixed]

    return tuple(fixed + collectibles)
