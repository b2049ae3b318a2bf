"""
Checkpoint bonus-drop scheduler.

Purpose
-------
Turn session length into independent drop checkpoints and roll each one:

- One full checkpoint per complete 10 minutes of session time
- A partial checkpoint for the remainder, its chance scaled by the
  fraction of the interval covered
- Sessions shorter than 5 minutes get no checkpoints at all

Each successful checkpoint draws once from the unified nine-bucket table.

Design Notes
------------
- The per-checkpoint chance is `base + max(0, drop_rate_boost)`, capped at
  MAX_DROP_CHANCE before the partial multiplier is applied
- Planning is pure (`plan_checkpoints`); only `CheckpointScheduler.roll`
  touches the random source
"""

from __future__ import annotations

from typing import AbstractSet, List, NamedTuple, Tuple

from tomeloot.core.logging.logger import get_logger
from tomeloot.domain.models import CollectibleRarity, DropOutcome
from tomeloot.modules.loot.engine import LootEngine
from tomeloot.modules.shared.constants import (
    BASE_CHECKPOINT_DROP_CHANCE,
    CHECKPOINT_INTERVAL_MINUTES,
    MAX_DROP_CHANCE,
    MINIMUM_SESSION_MINUTES,
)

logger = get_logger(__name__)


class CheckpointPlan(NamedTuple):
    full_checkpoints: int
    partial_fraction: float
    chance: float

    @property
    def partial_chance(self) -> float:
        return self.chance * self.partial_fraction


def checkpoint_chance(
    drop_rate_boost: float = 0.0, base_chance: float = BASE_CHECKPOINT_DROP_CHANCE
) -> float:
    """
    Uncapped per-checkpoint chance. Negative boosts count as 0.

    Example:
        >>> checkpoint_chance(0.04)
        0.05
    """
    return base_chance + max(0.0, drop_rate_boost)


def plan_checkpoints(
    session_minutes: float,
    drop_rate_boost: float = 0.0,
    base_chance: float = BASE_CHECKPOINT_DROP_CHANCE,
    interval_minutes: int = CHECKPOINT_INTERVAL_MINUTES,
    minimum_minutes: int = MINIMUM_SESSION_MINUTES,
    max_chance: float = MAX_DROP_CHANCE,
) -> CheckpointPlan:
    """
    Work out how many checkpoints a session earns and at what chance.

    Args:
        session_minutes: Session length, fractional minutes allowed
        drop_rate_boost: Summed drop-rate boost from modifiers and buffs

    Returns:
        CheckpointPlan; zero checkpoints below the minimum session length

    Example:
        >>> plan_checkpoints(25)
        CheckpointPlan(full_checkpoints=2, partial_fraction=0.5, chance=0.01)
        >>> plan_checkpoints(4.5)
        CheckpointPlan(full_checkpoints=0, partial_fraction=0.0, chance=0.0)
    """
    if session_minutes < minimum_minutes:
        return CheckpointPlan(0, 0.0, 0.0)

    full, remainder = divmod(session_minutes, interval_minutes)
    chance = min(max_chance, checkpoint_chance(drop_rate_boost, base_chance))
    return CheckpointPlan(int(full), remainder / interval_minutes, chance)


class CheckpointScheduler:
    """
    Rolls checkpoint drops for a session.

    Args:
        engine: Loot engine supplying the random source and unified table
        Remaining arguments override the checkpoint balance values
    """

    def __init__(
        self,
        engine: LootEngine,
        base_chance: float = BASE_CHECKPOINT_DROP_CHANCE,
        interval_minutes: int = CHECKPOINT_INTERVAL_MINUTES,
        minimum_minutes: int = MINIMUM_SESSION_MINUTES,
        max_chance: float = MAX_DROP_CHANCE,
    ) -> None:
        self.engine = engine
        self.base_chance = base_chance
        self.interval_minutes = interval_minutes
        self.minimum_minutes = minimum_minutes
        self.max_chance = max_chance

    def plan(self, session_minutes: float, drop_rate_boost: float = 0.0) -> CheckpointPlan:
        return plan_checkpoints(
            session_minutes,
            drop_rate_boost,
            base_chance=self.base_chance,
            interval_minutes=self.interval_minutes,
            minimum_minutes=self.minimum_minutes,
            max_chance=self.max_chance,
        )

    def roll(
        self,
        session_minutes: float,
        drop_rate_boost: float = 0.0,
        available_rarities: AbstractSet[CollectibleRarity] = frozenset(CollectibleRarity),
    ) -> Tuple[DropOutcome, ...]:
        """
        Roll every checkpoint of a session.

        Each checkpoint consumes one draw for the chance check and, on
        success, one more for the unified table.
        """
        plan = self.plan(session_minutes, drop_rate_boost)
        rng = self.engine.rng
        drops: List[DropOutcome] = []

        for _ in range(plan.full_checkpoints):
            if rng.random() < plan.chance:
                drops.append(self.engine.roll_unified_drop(available_rarities))

        if plan.partial_fraction > 0 and rng.random() < plan.partial_chance:
            drops.append(self.engine.roll_unified_drop(available_rarities))

        if drops:
            logger.debug(
                "Checkpoint drops rolled",
                extra={
                    "checkpoints": plan.full_checkpoints,
                    "partial_fraction": round(plan.partial_fraction, 3),
                    "drops": len(drops),
                },
            )
        return tuple(drops)
