"""
Effect aggregation.

Combines boosts from the two independent modifier sources (equipped
modifiers and active consumable buffs) into one `EffectTotals` that every
roll in a session reads. Scoped modifiers only count when their scope is
one of the entity's categories.
"""

from __future__ import annotations

from typing import AbstractSet, Dict, Iterable, Sequence

from tomeloot.core.logging.logger import get_logger
from tomeloot.domain.models import ActiveBuff, EffectTotals, EffectType, Modifier
from tomeloot.modules.consumables.catalog import ConsumableCatalog
from tomeloot.modules.consumables.manager import resolve_buff_effects

logger = get_logger(__name__)


def modifier_applies(modifier: Modifier, scopes: AbstractSet[str]) -> bool:
    """A modifier applies when it is unscoped or its scope is in `scopes`."""
    return modifier.scope is None or modifier.scope in scopes


def aggregate_modifiers(modifiers: Iterable[Modifier], scopes: Iterable[str]) -> EffectTotals:
    """
    Sum applicable modifier magnitudes per effect type.

    No capping here; consumers clamp what they need.
    """
    scope_set = frozenset(scopes)
    sums: Dict[EffectType, float] = {}
    skipped = 0

    for modifier in modifiers:
        if not modifier_applies(modifier, scope_set):
            skipped += 1
            continue
        sums[modifier.effect_type] = sums.get(modifier.effect_type, 0.0) + modifier.magnitude

    if skipped:
        logger.debug(
            "Scoped modifiers skipped",
            extra={"skipped": skipped, "scopes": sorted(scope_set)},
        )

    return EffectTotals.from_mapping(sums)


def combine_effects(*totals: EffectTotals) -> EffectTotals:
    """Field-wise sum of any number of totals."""
    combined = EffectTotals()
    for item in totals:
        combined = combined + item
    return combined


def resolve_session_effects(
    modifiers: Iterable[Modifier],
    scopes: Sequence[str],
    buffs: Iterable[ActiveBuff],
    catalog: ConsumableCatalog,
) -> EffectTotals:
    """
    Resolve the single set of effect totals for a session or box opening.

    Args:
        modifiers: Equipped modifiers
        scopes: Categories of the entity in play
        buffs: Active consumable buffs
        catalog: Maps buff definition ids to effect types

    Returns:
        Modifier totals plus buff totals
    """
    return combine_effects(
        aggregate_modifiers(modifiers, scopes),
        resolve_buff_effects(buffs, catalog),
    )
