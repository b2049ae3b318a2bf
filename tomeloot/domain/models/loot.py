"""
Loot value objects: stored loot boxes and ephemeral roll results.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from tomeloot.domain.models.base import (
    DomainValidationError,
    validate_aware,
    validate_non_negative,
    validate_not_empty,
)
from tomeloot.domain.models.consumable import ConsumableDefinition
from tomeloot.domain.models.enums import (
    BoxSource,
    BoxTier,
    CollectibleRarity,
    ConsumableTier,
    DropKind,
    RewardCategory,
)
from tomeloot.domain.models.progress import Collectible


@dataclass(frozen=True)
class LootBoxRecord:
    """
    A loot box owned by the user.

    A box with `tier=None` is blank: its tier is resolved when opened.
    Once a tier is set it is never re-rolled.
    """

    id: str
    tier: Optional[BoxTier]
    earned_at: datetime
    source: BoxSource
    owner_entity_id: Optional[str] = None

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        validate_aware(self.earned_at, "earned_at")
        if self.tier is not None and not isinstance(self.tier, BoxTier):
            object.__setattr__(self, "tier", BoxTier(self.tier))
        if not isinstance(self.source, BoxSource):
            object.__setattr__(self, "source", BoxSource(self.source))

    @property
    def is_blank(self) -> bool:
        return self.tier is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tier": self.tier.value if self.tier else None,
            "earned_at": self.earned_at.isoformat(),
            "source": self.source.value,
            "owner_entity_id": self.owner_entity_id,
        }


@dataclass(frozen=True)
class RewardResult:
    """What one opened box produced. Never persisted directly."""

    box_tier: BoxTier
    category: RewardCategory
    consumable: Optional[ConsumableDefinition] = None
    collectible_rarity: Optional[CollectibleRarity] = None

    def __post_init__(self) -> None:
        if self.category is RewardCategory.CONSUMABLE and self.consumable is None:
            raise DomainValidationError(
                "consumable rewards need a consumable", field="consumable"
            )
        if self.category is RewardCategory.COLLECTIBLE and self.collectible_rarity is None:
            raise DomainValidationError(
                "collectible rewards need a rarity", field="collectible_rarity"
            )


@dataclass(frozen=True)
class PityRoll:
    """Tier chosen by the pity-aware roll and the counter that follows it."""

    tier: BoxTier
    pity_counter: int
    forced: bool = False

    def __post_init__(self) -> None:
        validate_non_negative(self.pity_counter, "pity_counter")


@dataclass(frozen=True)
class DropOutcome:
    """
    One bucket of the unified bonus-drop table.

    Exactly one of the grade fields is set, matching `kind`.
    """

    kind: DropKind
    consumable_tier: Optional[ConsumableTier] = None
    box_tier: Optional[BoxTier] = None
    rarity: Optional[CollectibleRarity] = None

    def __post_init__(self) -> None:
        grade = {
            DropKind.CONSUMABLE: self.consumable_tier,
            DropKind.LOOT_BOX: self.box_tier,
            DropKind.COLLECTIBLE: self.rarity,
        }[self.kind]
        set_count = sum(
            value is not None for value in (self.consumable_tier, self.box_tier, self.rarity)
        )
        if grade is None or set_count != 1:
            raise DomainValidationError(
                f"{self.kind.value} drop must carry exactly its own grade", field="kind"
            )

    @property
    def grade(self) -> str:
        return (self.consumable_tier or self.box_tier or self.rarity).value


@dataclass(frozen=True)
class BonusDrop:
    """
    A resolved checkpoint drop as surfaced to the caller.

    - CONSUMABLE: `consumable` is set and was added to the active buffs
    - LOOT_BOX: `loot_box` is a ready record with source BONUS_DROP
    - COLLECTIBLE: `collectible` was unlocked from the entity pool

    `was_fallback` marks a collectible roll that found no matching pool
    entry and became a loot box of the equivalent tier instead.
    """

    kind: DropKind
    consumable: Optional[ConsumableDefinition] = None
    loot_box: Optional[LootBoxRecord] = None
    collectible: Optional[Collectible] = None
    original_rarity: Optional[CollectibleRarity] = None
    was_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind.value, "was_fallback": self.was_fallback}
        if self.consumable is not None:
            payload["consumable_id"] = self.consumable.id
        if self.loot_box is not None:
            payload["loot_box"] = self.loot_box.to_dict()
        if self.collectible is not None:
            payload["collectible_id"] = self.collectible.id
        if self.original_rarity is not None:
            payload["original_rarity"] = self.original_rarity.value
        return payload
