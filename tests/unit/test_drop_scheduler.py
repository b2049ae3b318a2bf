"""
Unit tests for checkpoint bonus drops.

Covers checkpoint planning (full, partial, minimum length, chance cap)
and the draw pattern of `CheckpointScheduler.roll`.
"""

import random

import pytest

from tomeloot.domain.models import CollectibleRarity, ConsumableTier, DropKind
from tomeloot.modules.drops import CheckpointPlan, CheckpointScheduler, checkpoint_chance, plan_checkpoints
from tomeloot.modules.loot import LootEngine


@pytest.mark.unit
class TestPlanCheckpoints:
    """Test pure checkpoint planning."""

    def test_full_and_partial_checkpoints(self):
        """25 minutes is two full checkpoints and half a partial one."""
        assert plan_checkpoints(25) == CheckpointPlan(2, 0.5, 0.01)

    def test_below_minimum_has_no_checkpoints(self):
        """Sessions under 5 minutes plan nothing."""
        assert plan_checkpoints(4) == CheckpointPlan(0, 0.0, 0.0)

    def test_minimum_session_gets_partial_only(self):
        """Exactly 5 minutes yields a half-weight partial checkpoint."""
        plan = plan_checkpoints(5)
        assert plan.full_checkpoints == 0
        assert plan.partial_fraction == pytest.approx(0.5)

    def test_negative_boost_counts_as_zero(self):
        """A negative drop-rate boost never lowers the base chance."""
        assert plan_checkpoints(30, -0.5) == plan_checkpoints(30)
        assert checkpoint_chance(-1.0) == pytest.approx(0.01)

    def test_cap_applies_before_partial_multiplier(self):
        """The 50% cap is applied first, then scaled by the partial fraction."""
        # Arrange & Act
        plan = plan_checkpoints(15, 0.9)

        # Assert
        assert plan.chance == pytest.approx(0.5)
        assert plan.partial_chance == pytest.approx(0.25)


@pytest.mark.unit
class TestCheckpointScheduler:
    """Test rolling checkpoints against the random source."""

    def test_short_session_draws_nothing(self, sequence_rng, catalog):
        """A 4-minute session consumes no draws."""
        # Arrange
        rng = sequence_rng()
        scheduler = CheckpointScheduler(LootEngine(rng, catalog))

        # Act
        drops = scheduler.roll(4)

        # Assert
        assert drops == ()
        assert rng.calls == 0

    def test_draw_pattern(self, sequence_rng, catalog):
        """Each success adds one table draw; the partial check comes last."""
        # Arrange: hit, table draw, miss, partial hit, table draw
        rng = sequence_rng(0.005, 0.0, 0.5, 0.004, 0.999)
        scheduler = CheckpointScheduler(LootEngine(rng, catalog))

        # Act
        drops = scheduler.roll(25)

        # Assert
        assert rng.calls == 5
        assert drops[0].kind is DropKind.CONSUMABLE
        assert drops[0].consumable_tier is ConsumableTier.WEAK
        assert drops[1].kind is DropKind.COLLECTIBLE
        assert drops[1].rarity is CollectibleRarity.LEGENDARY

    def test_capped_single_checkpoint_frequency(self, catalog):
        """At the 50% cap, 100 ten-minute sessions drop roughly half the time."""
        # Arrange
        scheduler = CheckpointScheduler(LootEngine(random.Random(42), catalog))

        # Act
        successes = sum(len(scheduler.roll(10, 0.5)) for _ in range(100))

        # Assert
        assert 30 <= successes <= 70

    def test_expected_drops_with_partial(self, catalog):
        """At the cap, 25 minutes averages 0.5 + 0.5 + 0.25 drops."""
        # Arrange
        scheduler = CheckpointScheduler(LootEngine(random.Random(42), catalog))

        # Act
        total = sum(len(scheduler.roll(25, 1.0)) for _ in range(2000))

        # Assert
        assert 1.15 <= total / 2000 <= 1.35

    def test_empty_pool_never_drops_collectibles(self, catalog):
        """With no available rarities only consumables and boxes drop."""
        scheduler = CheckpointScheduler(LootEngine(random.Random(7), catalog), base_chance=0.5)
        kinds = {
            drop.kind
            for _ in range(300)
            for drop in scheduler.roll(30, 0.0, available_rarities=frozenset())
        }
        assert DropKind.COLLECTIBLE not in kinds
        assert kinds
