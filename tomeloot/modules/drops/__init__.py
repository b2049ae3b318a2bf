"""Checkpoint bonus drops."""

from tomeloot.modules.drops.scheduler import (
    CheckpointPlan,
    CheckpointScheduler,
    checkpoint_chance,
    plan_checkpoints,
)

__all__ = ["CheckpointPlan", "CheckpointScheduler", "checkpoint_chance", "plan_checkpoints"]
