"""
Instant (duration 0) consumables.

Instant consumables never enter the buff list. They change the user's
progress snapshot directly: a streak shield extends its expiry, the other
effects arm a one-shot flag or counter consumed later (next box opening or
next session).
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta

from tomeloot.core.logging.logger import get_logger
from tomeloot.domain.models import ConsumableDefinition, EffectType, UserProgress
from tomeloot.modules.consumables.catalog import ConsumableCatalog
from tomeloot.modules.consumables.manager import apply_buff
from tomeloot.modules.shared.constants import STREAK_SHIELD_HOURS

logger = get_logger(__name__)


def apply_instant(
    progress: UserProgress, definition: ConsumableDefinition, now: datetime
) -> UserProgress:
    """
    Apply an instant consumable to a progress snapshot.

    Timed definitions and effect types without an instant behaviour return
    the snapshot unchanged.

    Example:
        A weak shield used at 12:00 with an existing expiry of 18:00 the
        same day moves the expiry to 18:00 the next day.
    """
    if not definition.is_instant:
        return progress

    effect = definition.effect_type

    if effect is EffectType.STREAK_SHIELD:
        hours = STREAK_SHIELD_HOURS[definition.tier.value]
        current_expiry = progress.streak_shield_expiry
        base = current_expiry if current_expiry is not None and current_expiry > now else now
        return replace(progress, streak_shield_expiry=base + timedelta(hours=hours))

    if effect is EffectType.BOX_UPGRADE:
        return replace(progress, pending_box_upgrade=True)

    if effect is EffectType.GUARANTEED_COLLECTIBLE:
        return replace(progress, pending_guaranteed_collectible=True)

    if effect is EffectType.INSTANT_LEVEL:
        return replace(progress, pending_instant_levels=progress.pending_instant_levels + 1)

    logger.debug(
        "Instant consumable has no instant effect",
        extra={"definition_id": definition.id, "effect_type": effect.value},
    )
    return progress


def use_consumable(
    progress: UserProgress,
    definition: ConsumableDefinition,
    catalog: ConsumableCatalog,
    now: datetime,
) -> UserProgress:
    """Route a consumable to its instant effect or onto the active buffs."""
    if definition.is_instant:
        return apply_instant(progress, definition, now)
    return replace(progress, active_buffs=apply_buff(progress.active_buffs, definition, catalog, now))


def has_streak_shield(progress: UserProgress, now: datetime) -> bool:
    return progress.shield_active(now)


def shield_hours_remaining(progress: UserProgress, now: datetime) -> int:
    """Whole hours of protection left, rounded up; 0 when no shield is active."""
    if not progress.shield_active(now):
        return 0
    remaining = progress.streak_shield_expiry - now
    return math.ceil(remaining.total_seconds() / 3600)
