"""Effect aggregation across equipped modifiers and active buffs."""

from tomeloot.modules.effects.aggregator import (
    aggregate_modifiers,
    combine_effects,
    modifier_applies,
    resolve_session_effects,
)

__all__ = [
    "aggregate_modifiers",
    "combine_effects",
    "modifier_applies",
    "resolve_session_effects",
]
