"""
Active buff lifecycle.

Buffs are held in an ordered tuple of `ActiveBuff`. Every function here
takes a tuple and returns a new one; nothing is mutated in place. Buffs
are keyed by effect type: at most one entry per effect type survives an
apply or consolidate, with durations and magnitudes summed.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from tomeloot.core.logging.logger import get_logger
from tomeloot.domain.models import ActiveBuff, ConsumableDefinition, EffectTotals, EffectType
from tomeloot.modules.consumables.catalog import ConsumableCatalog

logger = get_logger(__name__)

Buffs = Tuple[ActiveBuff, ...]


class ConsolidationResult(NamedTuple):
    buffs: Buffs
    merged_count: int


def apply_buff(
    buffs: Iterable[ActiveBuff],
    definition: ConsumableDefinition,
    catalog: ConsumableCatalog,
    now: Optional[datetime] = None,
) -> Buffs:
    """
    Add a timed consumable to the active buffs.

    Instant definitions (duration 0) are a no-op here; they go through
    `apply_instant`. A buff with the same effect type already running
    absorbs the new one: durations add and magnitudes add.
    """
    current = tuple(buffs)
    if definition.is_instant:
        return current

    for index, existing in enumerate(current):
        if catalog.effect_of(existing.definition_id) is not definition.effect_type:
            continue

        existing_definition = catalog.get(existing.definition_id)
        merged = replace(
            existing,
            remaining_duration=existing.remaining_duration + definition.duration,
            stacked_magnitude=existing.effective_magnitude(existing_definition) + definition.magnitude,
        )
        return current[:index] + (merged,) + current[index + 1:]

    return current + (
        ActiveBuff(
            definition_id=definition.id,
            remaining_duration=definition.duration,
            applied_at=now,
        ),
    )


def tick_buffs(buffs: Iterable[ActiveBuff], elapsed_minutes: int) -> Buffs:
    """
    Decay every buff by whole session minutes and drop the expired ones.

    Example:
        60-minute buff ticked by 45 -> 15 remaining; ticked by 60 -> removed
    """
    elapsed = max(0, int(elapsed_minutes))
    ticked = (
        replace(buff, remaining_duration=buff.remaining_duration - elapsed) for buff in buffs
    )
    return tuple(buff for buff in ticked if buff.remaining_duration > 0)


def resolve_buff_effects(buffs: Iterable[ActiveBuff], catalog: ConsumableCatalog) -> EffectTotals:
    """
    Sum buff magnitudes per effect type.

    Unknown definition ids contribute nothing. Non-modifier effect types
    (shields, upgrades) never sit in the buff list, and are ignored if a
    legacy entry carries one.
    """
    sums: Dict[EffectType, float] = {}
    for buff in buffs:
        definition = catalog.get(buff.definition_id)
        if definition is None:
            logger.debug("Unknown buff definition ignored", extra={"definition_id": buff.definition_id})
            continue
        magnitude = buff.effective_magnitude(definition)
        sums[definition.effect_type] = sums.get(definition.effect_type, 0.0) + magnitude
    return EffectTotals.from_mapping(sums)


def consolidate_buffs(buffs: Iterable[ActiveBuff], catalog: ConsumableCatalog) -> ConsolidationResult:
    """
    Merge duplicate same-effect buffs left behind by older data.

    The first buff of each effect type is the anchor; later duplicates add
    their remaining duration and effective magnitude into it. Entries whose
    definition is unknown are dropped. Running this twice changes nothing.
    """
    merged: Dict[EffectType, ActiveBuff] = {}
    order: List[EffectType] = []
    merged_count = 0
    dropped = 0

    for buff in buffs:
        definition = catalog.get(buff.definition_id)
        if definition is None:
            dropped += 1
            continue

        anchor = merged.get(definition.effect_type)
        if anchor is None:
            merged[definition.effect_type] = buff
            order.append(definition.effect_type)
            continue

        anchor_definition = catalog.get(anchor.definition_id)
        merged[definition.effect_type] = replace(
            anchor,
            remaining_duration=anchor.remaining_duration + buff.remaining_duration,
            stacked_magnitude=(
                anchor.effective_magnitude(anchor_definition) + buff.effective_magnitude(definition)
            ),
        )
        merged_count += 1

    if merged_count or dropped:
        logger.info(
            "Active buffs consolidated",
            extra={"merged_count": merged_count, "dropped_unknown": dropped},
        )

    return ConsolidationResult(tuple(merged[effect] for effect in order), merged_count)


def remove_used_buff(
    buffs: Iterable[ActiveBuff], effect_type: EffectType, catalog: ConsumableCatalog
) -> Buffs:
    """Remove the first buff of `effect_type`; others are kept in order."""
    result: List[ActiveBuff] = []
    removed = False
    for buff in buffs:
        if not removed and catalog.effect_of(buff.definition_id) is effect_type:
            removed = True
            continue
        result.append(buff)
    return tuple(result)
