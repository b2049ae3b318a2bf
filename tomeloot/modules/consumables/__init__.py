"""
Consumables: catalog, timed buff lifecycle and instant effects.
"""

from tomeloot.modules.consumables.catalog import ConsumableCatalog
from tomeloot.modules.consumables.instant import (
    apply_instant,
    has_streak_shield,
    shield_hours_remaining,
    use_consumable,
)
from tomeloot.modules.consumables.manager import (
    ConsolidationResult,
    apply_buff,
    consolidate_buffs,
    remove_used_buff,
    resolve_buff_effects,
    tick_buffs,
)

__all__ = [
    "ConsumableCatalog",
    "ConsolidationResult",
    "apply_buff",
    "apply_instant",
    "consolidate_buffs",
    "has_streak_shield",
    "remove_used_buff",
    "resolve_buff_effects",
    "shield_hours_remaining",
    "tick_buffs",
    "use_consumable",
]
