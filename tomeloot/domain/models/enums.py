"""
Enumerations for the TomeLoot reward economy.

All enums subclass `str` so their values serialize directly and look up
into the string-keyed odds tables in `modules.shared.constants`.
"""

import enum
from typing import FrozenSet


class BoxTier(str, enum.Enum):
    """Loot box quality grade (wood / silver / gold)."""

    LOW = "low"
    MID = "mid"
    HIGH = "high"

    def upgraded(self) -> "BoxTier":
        """One step up, capped at HIGH."""
        if self is BoxTier.LOW:
            return BoxTier.MID
        return BoxTier.HIGH


class RewardCategory(str, enum.Enum):
    CONSUMABLE = "consumable"
    COLLECTIBLE = "collectible"


class ConsumableTier(str, enum.Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


class CollectibleRarity(str, enum.Enum):
    COMMON = "common"
    RARE = "rare"
    LEGENDARY = "legendary"


class EffectType(str, enum.Enum):
    """
    Closed set of effect types.

    The first six are magnitudes that sum into `EffectTotals`; the rest are
    one-shot consumable effects handled by `apply_instant`.
    """

    XP_BOOST = "xp_boost"
    LUCK = "luck"
    RARE_LUCK = "rare_luck"
    LEGENDARY_LUCK = "legendary_luck"
    DROP_RATE_BOOST = "drop_rate_boost"
    COMPLETION_BONUS = "completion_bonus"
    STREAK_SHIELD = "streak_shield"
    BOX_UPGRADE = "box_upgrade"
    GUARANTEED_COLLECTIBLE = "guaranteed_collectible"
    INSTANT_LEVEL = "instant_level"

    @property
    def is_modifier(self) -> bool:
        return self in MODIFIER_EFFECTS


MODIFIER_EFFECTS: FrozenSet[EffectType] = frozenset(
    {
        EffectType.XP_BOOST,
        EffectType.LUCK,
        EffectType.RARE_LUCK,
        EffectType.LEGENDARY_LUCK,
        EffectType.DROP_RATE_BOOST,
        EffectType.COMPLETION_BONUS,
    }
)


class BoxSource(str, enum.Enum):
    """Why a loot box was granted."""

    LEVEL_UP = "level_up"
    COMPLETION = "completion"
    BONUS_DROP = "bonus_drop"


class DropKind(str, enum.Enum):
    """What a unified bonus-drop roll produced."""

    CONSUMABLE = "consumable"
    LOOT_BOX = "loot_box"
    COLLECTIBLE = "collectible"
