"""
Unit Tests for SessionRewardService
===================================

Purpose
-------
Test the session-end pipeline end to end: XP, leveling, category
distribution, earned loot boxes with pity, checkpoint drops and the
progress counters.

Test Coverage
-------------
- XP with streak multiplier and boosts
- Completion floor and instant levels
- Pity threading across boxes earned in one session
- Checkpoint drops: consumables, collectibles and the box fallback
- Zero-length sessions
- Category milestones

Testing Strategy
----------------
- `constant_rng(0.99)` keeps every box low tier and every checkpoint dry
- `constant_rng(0.0)` makes every checkpoint hit the first positive bucket
- AAA pattern (Arrange, Act, Assert)
"""

import pytest

from tomeloot.domain.models import (
    ActiveBuff,
    BoxSource,
    BoxTier,
    Collectible,
    CollectibleRarity,
    DropKind,
    EffectType,
    LootBoxRecord,
    Modifier,
    UserProgress,
)

HOUR = 3600


# ============================================================================
# XP
# ============================================================================


@pytest.mark.unit
class TestSessionXp:
    """Test XP awarded at session end."""

    def test_plain_hour(self, make_service, constant_rng, make_entity, progress):
        """60 minutes with no boosts awards 600 XP."""
        # Arrange
        service = make_service(constant_rng(0.99))

        # Act
        result = service.process_session_end(make_entity(), progress, [], HOUR)

        # Assert
        assert result.xp_gained == 600
        assert result.progress.total_xp == 600

    def test_equipped_boosts_stack(self, make_service, constant_rng, make_entity, progress):
        """Two XP modifiers of 20% and 10% award 780 XP."""
        # Arrange
        service = make_service(constant_rng(0.99))
        modifiers = [Modifier(EffectType.XP_BOOST, 0.2), Modifier(EffectType.XP_BOOST, 0.1)]

        # Act
        result = service.process_session_end(make_entity(), progress, modifiers, HOUR)

        # Assert
        assert result.xp_gained == 780

    def test_out_of_scope_modifier_ignored(self, make_service, constant_rng, make_entity, progress):
        """A modifier scoped to another category adds nothing."""
        service = make_service(constant_rng(0.99))
        modifiers = [Modifier(EffectType.XP_BOOST, 0.2), Modifier(EffectType.XP_BOOST, 0.5, scope="poetry")]
        result = service.process_session_end(make_entity(), progress, modifiers, HOUR)
        assert result.xp_gained == 720

    def test_streak_and_boost(self, make_service, constant_rng, make_entity):
        """A 3-day streak and a 20% boost award 864 XP."""
        # Arrange
        service = make_service(constant_rng(0.99))
        progress = UserProgress(current_streak=3, longest_streak=3)

        # Act
        result = service.process_session_end(
            make_entity(), progress, [Modifier(EffectType.XP_BOOST, 0.2)], HOUR
        )

        # Assert
        assert result.streak_multiplier == 1.2
        assert result.base_xp == 720
        assert result.xp_gained == 864

    def test_active_buff_boosts_xp(self, make_service, constant_rng, make_entity):
        """A 25% XP buff boosts the hour and ticks down by 60 minutes."""
        # Arrange
        service = make_service(constant_rng(0.99))
        progress = UserProgress(active_buffs=(ActiveBuff("med_xp_1", 90),))

        # Act
        result = service.process_session_end(make_entity(), progress, [], HOUR)

        # Assert
        assert result.xp_gained == 750
        assert result.progress.active_buffs[0].remaining_duration == 30


# ============================================================================
# LEVELING & LOOT BOXES
# ============================================================================


@pytest.mark.unit
class TestLevelingAndBoxes:
    """Test levels and the boxes they earn."""

    def test_completion_floor_awards_boxes(self, make_service, constant_rng, make_entity, progress):
        """Finishing a 300-page book at 4 hours lifts it to level 10."""
        # Arrange
        service = make_service(constant_rng(0.99))
        entity = make_entity(total_seconds=3 * HOUR, size=300)

        # Act
        result = service.process_session_end(entity, progress, [], HOUR, is_completion=True)

        # Assert
        assert result.completion_levels == 6
        assert result.levels_gained == 7
        assert result.new_level == 10
        assert [box.source for box in result.loot_boxes] == (
            [BoxSource.LEVEL_UP] + [BoxSource.COMPLETION] * 6
        )
        assert result.progress.entities_completed == 1

    def test_completion_bonus_does_not_compound(self, make_service, constant_rng, make_entity, progress):
        """After a completion, later sessions level from logged time again."""
        # Arrange
        service = make_service(constant_rng(0.99))
        entity = make_entity(total_seconds=3 * HOUR, size=300)
        completed = service.process_session_end(entity, progress, [], HOUR, is_completion=True)

        # Act
        later = service.process_session_end(completed.entity, completed.progress, [], 6 * HOUR)

        # Assert
        assert completed.new_level == 10
        assert later.previous_level == 10
        assert later.new_level == 10
        assert later.levels_gained == 6
        assert later.entity.progression.level == 10
        assert later.entity.progression.total_seconds == 10 * HOUR

    def test_fractional_seconds_rounded_once(self, make_service, constant_rng, make_entity, progress):
        """Fractional session time is rounded before levels, XP and stored time."""
        # Arrange
        service = make_service(constant_rng(0.99))

        # Act
        result = service.process_session_end(make_entity(), progress, [], 3599.6)

        # Assert
        assert result.new_level == 1
        assert result.xp_gained == 600
        assert result.entity.progression.total_seconds == HOUR

    def test_levels_distribute_over_categories(self, make_service, constant_rng, make_entity, progress):
        """Two levels over three categories give 1, 1, 0."""
        # Arrange
        service = make_service(constant_rng(0.99))

        # Act
        result = service.process_session_end(make_entity(), progress, [], 2 * HOUR)

        # Assert
        assert result.category_deltas == {"fantasy": 1, "mystery": 1, "history": 0}
        assert result.progress.category_level("fantasy") == 1
        assert result.progress.category_level("history") == 0
        assert sum(result.category_deltas.values()) == result.levels_gained

    def test_boxes_are_tiered_and_stamped(self, make_service, constant_rng, make_entity, progress, fixed_now):
        """Earned boxes carry a tier, the entity id and the session time."""
        # Arrange
        service = make_service(constant_rng(0.99))

        # Act
        result = service.process_session_end(make_entity(), progress, [], HOUR)

        # Assert
        box = result.loot_boxes[0]
        assert box.id == "box-1"
        assert box.tier is BoxTier.LOW
        assert box.owner_entity_id == "book-1"
        assert box.earned_at == fixed_now
        assert result.entity.progression.level_up_timestamps == (fixed_now,)

    def test_pity_threads_through_session(self, make_service, constant_rng, make_entity):
        """At counter 23 the second box of the session is forced high."""
        # Arrange
        service = make_service(constant_rng(0.99))
        progress = UserProgress(pity_counter=23)

        # Act
        result = service.process_session_end(make_entity(), progress, [], 2 * HOUR)

        # Assert
        assert [box.tier for box in result.loot_boxes] == [BoxTier.LOW, BoxTier.HIGH]
        assert result.progress.pity_counter == 0

    def test_instant_levels_consumed(self, make_service, constant_rng, make_entity):
        """Pending instant levels add level-up boxes and are used up."""
        # Arrange
        service = make_service(constant_rng(0.99))
        progress = UserProgress(pending_instant_levels=2)

        # Act
        result = service.process_session_end(make_entity(), progress, [], 600)

        # Assert
        assert result.instant_levels == 2
        assert result.new_level == 2
        assert [box.source for box in result.loot_boxes] == [BoxSource.LEVEL_UP] * 2
        assert result.progress.pending_instant_levels == 0

    def test_category_milestone_recorded(self, make_service, constant_rng, make_entity):
        """Crossing level 10 in a category records the milestone once."""
        # Arrange
        service = make_service(constant_rng(0.99))
        entity = make_entity(categories=("fantasy",))
        progress = UserProgress(category_levels={"fantasy": 9})

        # Act
        result = service.process_session_end(entity, progress, [], HOUR)

        # Assert
        assert result.progress.category_level("fantasy") == 10
        assert result.progress.category_milestones == ("fantasy",)
        assert result.progress.categories_read == ("fantasy",)


# ============================================================================
# ZERO-LENGTH SESSIONS
# ============================================================================


@pytest.mark.unit
class TestZeroSession:
    """Test sessions with no time."""

    def test_zero_session_changes_nothing(self, make_service, sequence_rng, make_entity, progress):
        """No time means no draws, no boxes and identical snapshots."""
        # Arrange
        rng = sequence_rng()
        service = make_service(rng)
        entity = make_entity(total_seconds=HOUR)

        # Act
        result = service.process_session_end(entity, progress, [], 0)

        # Assert
        assert rng.calls == 0
        assert result.all_loot_boxes == ()
        assert result.xp_gained == 0
        assert result.entity == entity
        assert result.progress == progress

    def test_zero_session_keeps_bonus_level(self, make_service, sequence_rng, make_entity, progress):
        """A stored level above the time level survives an empty session."""
        entity = make_entity(total_seconds=HOUR, level=7)
        result = make_service(sequence_rng()).process_session_end(entity, progress, [], 0)
        assert result.new_level == 7
        assert result.entity == entity

    def test_negative_session_counts_as_zero(self, make_service, sequence_rng, make_entity):
        """Negative time is clamped and keeps pending instant levels."""
        # Arrange
        service = make_service(sequence_rng())
        progress = UserProgress(pending_instant_levels=1, sessions_completed=4)

        # Act
        result = service.process_session_end(make_entity(), progress, [], -300, is_completion=True)

        # Assert
        assert result.levels_gained == 0
        assert result.progress.pending_instant_levels == 1
        assert result.progress.sessions_completed == 4


# ============================================================================
# CHECKPOINT DROPS
# ============================================================================


@pytest.mark.unit
class TestCheckpointDrops:
    """Test bonus drops resolved at session end."""

    def test_consumable_drops_become_buffs(self, make_service, constant_rng, make_entity, progress):
        """Three checkpoint hits each drop Minor XP Scroll, merged into one buff."""
        # Arrange
        service = make_service(constant_rng(0.0))

        # Act
        result = service.process_session_end(make_entity(), progress, [], 25 * 60)

        # Assert
        assert [drop.kind for drop in result.bonus_drops] == [DropKind.CONSUMABLE] * 3
        assert all(drop.consumable.id == "weak_xp_1" for drop in result.bonus_drops)
        assert len(result.progress.active_buffs) == 1
        buff = result.progress.active_buffs[0]
        assert buff.remaining_duration == 180
        assert buff.stacked_magnitude == pytest.approx(0.3)
        assert result.xp_gained == 250

    def test_collectible_pool_exhaustion_falls_back(
        self, config_manager, make_service, constant_rng, make_entity, progress
    ):
        """Only one common collectible exists; later commons become low boxes."""
        # Arrange
        config_manager.set(
            "loot.unified_drop_weights",
            {
                "consumable": {"weak": 0.0, "medium": 0.0, "strong": 0.0},
                "loot_box": {"low": 0.0, "mid": 0.0, "high": 0.0},
                "collectible": {"common": 1.0, "rare": 0.0, "legendary": 0.0},
            },
        )
        service = make_service(constant_rng(0.0))
        owl = Collectible("owl", "Reading Owl", CollectibleRarity.COMMON)
        entity = make_entity(collectible_pool=(owl,))

        # Act
        result = service.process_session_end(entity, progress, [], 25 * 60)

        # Assert
        kinds = [drop.kind for drop in result.bonus_drops]
        assert kinds == [DropKind.COLLECTIBLE, DropKind.LOOT_BOX, DropKind.LOOT_BOX]
        fallbacks = result.bonus_drops[1:]
        assert all(drop.was_fallback for drop in fallbacks)
        assert all(drop.original_rarity is CollectibleRarity.COMMON for drop in fallbacks)
        assert [box.tier for box in result.all_loot_boxes] == [BoxTier.LOW, BoxTier.LOW]
        assert all(box.source is BoxSource.BONUS_DROP for box in result.all_loot_boxes)
        assert result.entity.collectible_pool == ()
        assert result.entity.unlocked_collectibles[0].id == "owl"
        assert result.entity.unlocked_collectibles[0].is_unlocked
        assert result.progress.collectibles_collected == 1

    def test_dry_session_has_no_drops(self, make_service, constant_rng, make_entity, progress):
        """High draws never pass the checkpoint chance."""
        service = make_service(constant_rng(0.99))
        result = service.process_session_end(make_entity(), progress, [], 3 * HOUR)
        assert result.bonus_drops == ()
        assert result.all_loot_boxes == result.loot_boxes


# ============================================================================
# BOX OPENING THROUGH THE SERVICE
# ============================================================================


@pytest.mark.unit
class TestServiceOpenBox:
    """Test opening earned boxes with the service's engine."""

    def test_open_earned_box_keeps_tier(self, make_service, constant_rng, make_entity, progress):
        """A pre-tiered box is not re-rolled when opened."""
        # Arrange
        service = make_service(constant_rng(0.99))
        earned = service.process_session_end(make_entity(), progress, [], HOUR)

        # Act
        opened = service.open_loot_box(earned.loot_boxes[0], earned.progress, entity=earned.entity)

        # Assert
        assert opened.tier is BoxTier.LOW
        assert opened.tier_was_rolled is False
        assert opened.progress.pity_counter == 2

    def test_entity_without_pool_keeps_guarantee(self, make_service, sequence_rng, make_entity, fixed_now):
        """A guarantee cannot be spent on an entity with no collectibles."""
        # Arrange
        service = make_service(sequence_rng(0.0, 0.0, 0.0))
        box = LootBoxRecord(id="box-9", tier=BoxTier.HIGH, earned_at=fixed_now, source=BoxSource.LEVEL_UP)
        progress = UserProgress(pending_guaranteed_collectible=True)

        # Act
        opened = service.open_loot_box(box, progress, entity=make_entity())

        # Assert
        assert opened.guaranteed_collectible_used is False
        assert opened.progress.pending_guaranteed_collectible is True
