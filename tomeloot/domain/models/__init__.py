"""
Domain models package for TomeLoot.

Purpose
-------
Immutable value objects describing the reward economy: entities, user
progress, modifiers, consumables, loot boxes and result objects. Services
never mutate these; they build new snapshots with `dataclasses.replace`.

Design Notes
------------
- Frozen dataclasses validated in `__post_init__`
- Collections are tuples
- `str` enums for every closed vocabulary
"""

from tomeloot.domain.models.base import DomainValidationError
from tomeloot.domain.models.consumable import ActiveBuff, ConsumableDefinition
from tomeloot.domain.models.effects import EffectTotals, Modifier
from tomeloot.domain.models.enums import (
    MODIFIER_EFFECTS,
    BoxSource,
    BoxTier,
    CollectibleRarity,
    ConsumableTier,
    DropKind,
    EffectType,
    RewardCategory,
)
from tomeloot.domain.models.loot import (
    BonusDrop,
    DropOutcome,
    LootBoxRecord,
    PityRoll,
    RewardResult,
)
from tomeloot.domain.models.progress import (
    Collectible,
    Progression,
    TrackedEntity,
    UserProgress,
)
from tomeloot.domain.models.session import BoxOpenResult, SessionRewardResult

__all__ = [
    "DomainValidationError",
    "ActiveBuff",
    "ConsumableDefinition",
    "EffectTotals",
    "Modifier",
    "MODIFIER_EFFECTS",
    "BoxSource",
    "BoxTier",
    "CollectibleRarity",
    "ConsumableTier",
    "DropKind",
    "EffectType",
    "RewardCategory",
    "BonusDrop",
    "DropOutcome",
    "LootBoxRecord",
    "PityRoll",
    "RewardResult",
    "Collectible",
    "Progression",
    "TrackedEntity",
    "UserProgress",
    "BoxOpenResult",
    "SessionRewardResult",
]
