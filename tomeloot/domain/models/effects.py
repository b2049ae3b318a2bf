"""
Effect value objects: equipped modifiers and resolved effect totals.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from tomeloot.domain.models.base import DomainValidationError, validate_range
from tomeloot.domain.models.enums import EffectType


@dataclass(frozen=True)
class Modifier:
    """
    A boost granted by an equipped bonus.

    Attributes
    ----------
    effect_type : EffectType
        One of the six modifier effect types
    magnitude : float
        Boost size in (0, 1]
    scope : Optional[str]
        Category the modifier is restricted to; None applies everywhere
    """

    effect_type: EffectType
    magnitude: float
    scope: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.effect_type, EffectType):
            object.__setattr__(self, "effect_type", EffectType(self.effect_type))
        if not self.effect_type.is_modifier:
            raise DomainValidationError(
                f"{self.effect_type.value} is not a modifier effect",
                field="effect_type",
            )
        if self.magnitude <= 0:
            raise DomainValidationError(
                f"magnitude must be positive, got {self.magnitude}",
                field="magnitude",
            )
        validate_range(self.magnitude, 0, 1, "magnitude")


@dataclass(frozen=True)
class EffectTotals:
    """
    Summed magnitudes per modifier effect type.

    No capping happens here; each consumer clamps what it needs
    (loot rolls clamp luck to [0, 1], the drop scheduler floors the
    drop-rate boost at 0).
    """

    xp_boost: float = 0.0
    luck: float = 0.0
    rare_luck: float = 0.0
    legendary_luck: float = 0.0
    drop_rate_boost: float = 0.0
    completion_bonus: float = 0.0

    # EffectType -> field name
    FIELD_BY_EFFECT = {
        EffectType.XP_BOOST: "xp_boost",
        EffectType.LUCK: "luck",
        EffectType.RARE_LUCK: "rare_luck",
        EffectType.LEGENDARY_LUCK: "legendary_luck",
        EffectType.DROP_RATE_BOOST: "drop_rate_boost",
        EffectType.COMPLETION_BONUS: "completion_bonus",
    }

    def __add__(self, other: "EffectTotals") -> "EffectTotals":
        if not isinstance(other, EffectTotals):
            return NotImplemented
        return EffectTotals(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def get(self, effect_type: EffectType) -> float:
        name = self.FIELD_BY_EFFECT.get(effect_type)
        if name is None:
            return 0.0
        return getattr(self, name)

    @classmethod
    def from_mapping(cls, values: Mapping[EffectType, float]) -> "EffectTotals":
        """Build totals from an effect -> magnitude map; non-modifier keys are ignored."""
        kwargs: Dict[str, float] = {}
        for effect_type, magnitude in values.items():
            name = cls.FIELD_BY_EFFECT.get(EffectType(effect_type))
            if name is not None:
                kwargs[name] = kwargs.get(name, 0.0) + magnitude
        return cls(**kwargs)

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
