"""
Progress snapshots: the tracked entity and the user's reward state.

Both snapshots are immutable. The orchestrator reads them as input and
returns new instances built with `dataclasses.replace`; collections are
tuples so two snapshots never share a mutable container.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Union

from tomeloot.domain.models.base import (
    DomainValidationError,
    validate_aware,
    validate_non_negative,
    validate_not_empty,
)
from tomeloot.domain.models.consumable import ActiveBuff
from tomeloot.domain.models.enums import CollectibleRarity

CategoryLevels = Union[Mapping[str, int], Tuple[Tuple[str, int], ...]]


@dataclass(frozen=True)
class Progression:
    """
    Time-based leveling state of a tracked entity.

    Attributes
    ----------
    level : int
        Time-derived level plus the completion and instant levels of the
        latest session; earlier bonus levels are not carried forward
    total_seconds : int
        Accumulated session time
    level_up_timestamps : Tuple[datetime, ...]
        One entry per level gained
    """

    level: int = 0
    total_seconds: int = 0
    level_up_timestamps: Tuple[datetime, ...] = ()

    def __post_init__(self) -> None:
        validate_non_negative(self.level, "level")
        validate_non_negative(self.total_seconds, "total_seconds")
        object.__setattr__(self, "level_up_timestamps", tuple(self.level_up_timestamps))


@dataclass(frozen=True)
class Collectible:
    id: str
    name: str
    rarity: CollectibleRarity
    unlocked_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        if not isinstance(self.rarity, CollectibleRarity):
            object.__setattr__(self, "rarity", CollectibleRarity(self.rarity))
        validate_aware(self.unlocked_at, "unlocked_at")

    @property
    def is_unlocked(self) -> bool:
        return self.unlocked_at is not None


@dataclass(frozen=True)
class TrackedEntity:
    """
    The thing session time is logged against (a book).

    `categories` are the entity's genres: they scope modifiers and receive
    the distributed level gains. `collectible_pool` holds collectibles that
    can still be won from this entity.
    """

    id: str
    progression: Progression = field(default_factory=Progression)
    size: Optional[int] = None
    categories: Tuple[str, ...] = ()
    collectible_pool: Tuple[Collectible, ...] = ()
    unlocked_collectibles: Tuple[Collectible, ...] = ()

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        if self.size is not None:
            validate_non_negative(self.size, "size")
        categories = tuple(self.categories)
        if len(set(categories)) != len(categories):
            raise DomainValidationError("categories must be unique", field="categories")
        object.__setattr__(self, "categories", categories)
        object.__setattr__(self, "collectible_pool", tuple(self.collectible_pool))
        object.__setattr__(self, "unlocked_collectibles", tuple(self.unlocked_collectibles))

    def available_rarities(self) -> FrozenSet[CollectibleRarity]:
        """Rarities that still have a locked collectible in the pool."""
        return frozenset(c.rarity for c in self.collectible_pool if not c.is_unlocked)

    @property
    def has_collectibles(self) -> bool:
        return bool(self.available_rarities())


@dataclass(frozen=True)
class UserProgress:
    """
    Per-user reward state carried between sessions.

    `category_levels` accepts a mapping for convenience and is stored as a
    tuple of (category, level) pairs in insertion order.
    """

    total_xp: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_session_date: Optional[date] = None
    pity_counter: int = 0
    active_buffs: Tuple[ActiveBuff, ...] = ()
    streak_shield_expiry: Optional[datetime] = None
    pending_box_upgrade: bool = False
    pending_guaranteed_collectible: bool = False
    pending_instant_levels: int = 0
    category_levels: CategoryLevels = ()
    sessions_completed: int = 0
    entities_completed: int = 0
    collectibles_collected: int = 0
    categories_read: Tuple[str, ...] = ()
    category_milestones: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        validate_non_negative(self.total_xp, "total_xp")
        validate_non_negative(self.current_streak, "current_streak")
        validate_non_negative(self.longest_streak, "longest_streak")
        validate_non_negative(self.pity_counter, "pity_counter")
        validate_non_negative(self.pending_instant_levels, "pending_instant_levels")
        validate_aware(self.streak_shield_expiry, "streak_shield_expiry")

        levels = self.category_levels
        if isinstance(levels, Mapping):
            levels = tuple(levels.items())
        object.__setattr__(self, "category_levels", tuple((str(k), int(v)) for k, v in levels))
        object.__setattr__(self, "active_buffs", tuple(self.active_buffs))
        object.__setattr__(self, "categories_read", tuple(self.categories_read))
        object.__setattr__(self, "category_milestones", tuple(self.category_milestones))

    @property
    def category_level_map(self) -> Dict[str, int]:
        """Fresh dict copy of the category levels."""
        return dict(self.category_levels)

    def category_level(self, category: str) -> int:
        return self.category_level_map.get(category, 0)

    def shield_active(self, now: datetime) -> bool:
        return self.streak_shield_expiry is not None and self.streak_shield_expiry > now
