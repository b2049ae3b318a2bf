"""
Consumable definitions and active buff entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from tomeloot.domain.models.base import (
    validate_aware,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
)
from tomeloot.domain.models.enums import ConsumableTier, EffectType


@dataclass(frozen=True)
class ConsumableDefinition:
    """
    Static catalog entry for a consumable.

    Attributes
    ----------
    id : str
        Stable catalog identifier (e.g. "med_luck_1")
    name : str
        Display name
    description : str
        Display description
    tier : ConsumableTier
        Potency tier used by loot rolls
    effect_type : EffectType
        What the consumable does
    magnitude : float
        Effect size; for streak shields the number of days, for instant
        levels the number of levels
    duration : int
        Minutes the buff lasts; 0 marks an instant consumable
    """

    id: str
    name: str
    description: str
    tier: ConsumableTier
    effect_type: EffectType
    magnitude: float
    duration: int = 0

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        if not isinstance(self.tier, ConsumableTier):
            object.__setattr__(self, "tier", ConsumableTier(self.tier))
        if not isinstance(self.effect_type, EffectType):
            object.__setattr__(self, "effect_type", EffectType(self.effect_type))
        validate_positive(self.magnitude, "magnitude")
        validate_non_negative(self.duration, "duration")

    @property
    def is_instant(self) -> bool:
        return self.duration == 0


@dataclass(frozen=True)
class ActiveBuff:
    """
    A time-limited consumable effect currently running.

    `stacked_magnitude` is set once two buffs of the same effect merge;
    until then the catalog magnitude applies.
    """

    definition_id: str
    remaining_duration: int
    stacked_magnitude: Optional[float] = None
    applied_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_not_empty(self.definition_id, "definition_id")
        validate_aware(self.applied_at, "applied_at")

    def effective_magnitude(self, definition: ConsumableDefinition) -> float:
        if self.stacked_magnitude is not None:
            return self.stacked_magnitude
        return definition.magnitude
