"""
TomeLoot Gameplay Constants

Purpose
-------
Provide the balance constants for the reward economy: leveling, XP, streak
multipliers, loot odds, pity, checkpoint drops and shield durations.

IMPORTANT:
These are the code-level defaults. `config/balance.yaml` mirrors them and
services read through ConfigManager first, so a YAML change retunes the
engine without touching code.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Odds tables are keyed by the plain string values of the domain enums
  (`"low"`, `"weak"`, ...); the `str` enums look up into them directly
- Every odds table sums to 1.0
"""

from __future__ import annotations

from typing import Dict, Final, Mapping

# ============================================================================
# ENTITY LEVELING
# ============================================================================

SECONDS_PER_LEVEL: Final[int] = 3600  # One entity level per hour of session time
UNITS_PER_LEVEL: Final[int] = 30  # Size units (pages) per completion floor level
CATEGORY_MILESTONE_LEVEL: Final[int] = 10

# ============================================================================
# PLAYER XP
# ============================================================================

XP_PER_MINUTE: Final[int] = 10
XP_PER_PLAYER_LEVEL: Final[int] = 1000

# Streak multipliers, highest threshold first
STREAK_MULTIPLIER_TIERS: Final[tuple] = (
    (7, 1.5),
    (3, 1.2),
)
BASE_STREAK_MULTIPLIER: Final[float] = 1.0

# ============================================================================
# LOOT BOX TIERS
# ============================================================================

BOX_TIER_ODDS: Final[Mapping[str, float]] = {
    "low": 0.70,
    "mid": 0.25,
    "high": 0.05,
}

# Consumable vs collectible per box tier
CATEGORY_ODDS: Final[Mapping[str, Mapping[str, float]]] = {
    "low": {"consumable": 0.90, "collectible": 0.10},
    "mid": {"consumable": 0.60, "collectible": 0.40},
    "high": {"consumable": 0.25, "collectible": 0.75},
}

CONSUMABLE_TIER_ODDS: Final[Mapping[str, Mapping[str, float]]] = {
    "low": {"weak": 0.80, "medium": 0.20, "strong": 0.0},
    "mid": {"weak": 0.30, "medium": 0.60, "strong": 0.10},
    "high": {"weak": 0.0, "medium": 0.40, "strong": 0.60},
}

COLLECTIBLE_RARITY_ODDS: Final[Mapping[str, Mapping[str, float]]] = {
    "low": {"common": 1.0, "rare": 0.0, "legendary": 0.0},
    "mid": {"common": 0.60, "rare": 0.40, "legendary": 0.0},
    "high": {"common": 0.10, "rare": 0.60, "legendary": 0.30},
}

# Legendary luck triples its weight when widening the high-tier share
LEGENDARY_LUCK_WEIGHT: Final[float] = 3.0

# ============================================================================
# PITY SYSTEM
# ============================================================================

PITY_BONUS_PER_MISS: Final[float] = 0.03  # +3% high-tier share per miss
PITY_HARD_CAP: Final[int] = 25  # 25th box is guaranteed high tier

# ============================================================================
# CHECKPOINT BONUS DROPS
# ============================================================================

BASE_CHECKPOINT_DROP_CHANCE: Final[float] = 0.01
CHECKPOINT_INTERVAL_MINUTES: Final[int] = 10
MINIMUM_SESSION_MINUTES: Final[int] = 5
MAX_DROP_CHANCE: Final[float] = 0.5

# Unified bonus-drop table: (kind, grade) -> base weight
UNIFIED_DROP_WEIGHTS: Final[Mapping[str, Mapping[str, float]]] = {
    "consumable": {"weak": 0.40, "medium": 0.20, "strong": 0.05},
    "loot_box": {"low": 0.15, "mid": 0.08, "high": 0.02},
    "collectible": {"common": 0.06, "rare": 0.03, "legendary": 0.01},
}

# Collectible rarity -> loot box tier granted when the pool has none left
COLLECTIBLE_FALLBACK_TIER: Final[Mapping[str, str]] = {
    "common": "low",
    "rare": "mid",
    "legendary": "high",
}

# ============================================================================
# CONSUMABLES
# ============================================================================

# Hours of streak protection granted per consumable tier
STREAK_SHIELD_HOURS: Final[Dict[str, int]] = {
    "weak": 24,
    "medium": 72,
    "strong": 72,
}
