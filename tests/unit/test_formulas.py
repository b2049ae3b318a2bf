"""
Unit tests for progression formulas.

Tests entity leveling, the completion floor, category distribution,
streak multipliers, session XP and player level.
"""

import pytest

from tomeloot.modules.shared.formulas import (
    calculate_completion_bonus,
    calculate_level,
    calculate_player_level,
    calculate_session_xp,
    calculate_size_floor,
    distribute_levels,
    get_streak_multiplier,
    get_streak_multiplier_info,
    process_time,
    round_half_up,
    xp_progress,
)


@pytest.mark.unit
class TestEntityLeveling:
    """Test time-based entity levels."""

    def test_level_boundaries(self):
        """Levels tick over exactly at each full hour."""
        assert calculate_level(0) == 0
        assert calculate_level(3599) == 0
        assert calculate_level(3600) == 1
        assert calculate_level(7199) == 1
        assert calculate_level(7200) == 2

    def test_process_time_reports_levels_gained(self):
        """Crossing an hour boundary gains one level."""
        change = process_time(3000, 1200)
        assert change.previous_level == 0
        assert change.new_level == 1
        assert change.levels_gained == 1

    def test_negative_session_counts_as_zero(self):
        """Negative session time never removes levels."""
        change = process_time(7200, -5000)
        assert change.levels_gained == 0
        assert change.new_level == 2


@pytest.mark.unit
class TestCompletionBonus:
    """Test the completion floor."""

    def test_bonus_lifts_entity_to_floor(self):
        """Floor 10 at time level 4 awards exactly 6 levels."""
        assert calculate_size_floor(300) == 10
        assert calculate_completion_bonus(4 * 3600, 300) == 6

    def test_no_bonus_above_floor(self):
        """An entity at or above its floor gains nothing."""
        assert calculate_completion_bonus(10 * 3600, 300) == 0
        assert calculate_completion_bonus(12 * 3600, 300) == 0

    def test_unknown_size_has_no_floor(self):
        """Entities without a size get no completion bonus."""
        assert calculate_size_floor(None) == 0
        assert calculate_completion_bonus(0, None) == 0


@pytest.mark.unit
class TestDistributeLevels:
    """Test category level distribution."""

    def test_remainder_goes_to_first_categories(self):
        """2 levels over 3 categories distributes as 1, 1, 0 in input order."""
        result = distribute_levels(2, ["fantasy", "mystery", "history"])
        assert result == {"fantasy": 1, "mystery": 1, "history": 0}

    @pytest.mark.parametrize("levels", [0, 1, 5, 7, 13])
    def test_sum_always_matches(self, levels):
        """Distributed levels always add up to the levels gained."""
        result = distribute_levels(levels, ["a", "b", "c", "d"])
        assert sum(result.values()) == levels

    def test_no_categories(self):
        """No categories yields an empty distribution."""
        assert distribute_levels(3, []) == {}


@pytest.mark.unit
class TestSessionXp:
    """Test XP calculation."""

    def test_plain_hour(self):
        """A 60-minute session without boosts yields 600 XP."""
        assert calculate_session_xp(60) == (600, 600)

    def test_single_boost(self):
        """A 20% XP boost yields 720 XP."""
        assert calculate_session_xp(60, 1.0, 0.2) == (600, 720)

    def test_stacked_boosts(self):
        """A second 10% boost on top yields 780 XP."""
        assert calculate_session_xp(60, 1.0, 0.2 + 0.1) == (600, 780)

    def test_streak_applies_before_boosts(self):
        """A 3-day streak and a 20% boost yield 600 * 1.2 * 1.2 = 864."""
        multiplier = get_streak_multiplier(3)
        assert calculate_session_xp(60, multiplier, 0.2) == (720, 864)

    def test_zero_session(self):
        """No time means no XP regardless of boosts."""
        assert calculate_session_xp(0, 1.5, 0.5) == (0, 0)

    def test_round_half_up(self):
        """Halves round away from zero, unlike built-in round."""
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.4999) == 2


@pytest.mark.unit
class TestStreakMultiplier:
    """Test streak multiplier tiers."""

    @pytest.mark.parametrize(
        "streak,expected",
        [(0, 1.0), (2, 1.0), (3, 1.2), (6, 1.2), (7, 1.5), (30, 1.5)],
    )
    def test_tiers(self, streak, expected):
        """Tiers are exclusive, highest first."""
        assert get_streak_multiplier(streak) == expected

    def test_info_points_to_next_tier(self):
        """Info reports the next tier and the days left."""
        info = get_streak_multiplier_info(4)
        assert info.current == 1.2
        assert info.next == 1.5
        assert info.days_to_next == 3


@pytest.mark.unit
class TestPlayerLevel:
    """Test player level from XP."""

    def test_level_from_xp(self):
        """Level 1 at 0 XP, one level per 1000 XP."""
        assert calculate_player_level(0) == 1
        assert calculate_player_level(999) == 1
        assert calculate_player_level(1000) == 2
        assert xp_progress(2500) == (500, 1000)
