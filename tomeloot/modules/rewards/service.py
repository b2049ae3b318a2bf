"""
Session Reward Service

Purpose
-------
Process the end of a reading session in one deterministic pass (given the
random source) and return new entity and progress snapshots plus
everything the session earned.

Domain
------
- Resolve effect totals from equipped modifiers and active buffs
- Advance entity time and levels; the level is the time-derived level plus
  this session's completion and instant levels
- Award player XP with streak multiplier and XP boosts
- Distribute levels across the entity's categories
- Earn one loot box per level, tier rolled through the pity path
- Roll checkpoint bonus drops and resolve them into payloads
- Tick, extend and consolidate active buffs
- Maintain progress counters

Design Notes
------------
- Inputs are never mutated; all changes go into new frozen snapshots
- Balance values are read through ConfigManager with constant defaults
- `rng`, `id_factory` and `clock` are injectable for reproducible runs
"""

from __future__ import annotations

import random
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from tomeloot.core.config.config import Config
from tomeloot.domain.models import (
    ActiveBuff,
    BonusDrop,
    BoxOpenResult,
    BoxSource,
    BoxTier,
    Collectible,
    CollectibleRarity,
    DropKind,
    DropOutcome,
    EffectTotals,
    LootBoxRecord,
    Modifier,
    SessionRewardResult,
    TrackedEntity,
    UserProgress,
)
from tomeloot.modules.consumables.catalog import ConsumableCatalog
from tomeloot.modules.consumables.instant import use_consumable
from tomeloot.modules.consumables.manager import consolidate_buffs, tick_buffs
from tomeloot.modules.drops.scheduler import CheckpointScheduler
from tomeloot.modules.effects.aggregator import resolve_session_effects
from tomeloot.modules.loot.engine import LootBalance, LootEngine
from tomeloot.modules.loot.weighted import RandomSource
from tomeloot.modules.rewards.box_opening import open_loot_box
from tomeloot.modules.shared.base_service import BaseService
from tomeloot.modules.shared.constants import (
    BASE_CHECKPOINT_DROP_CHANCE,
    CATEGORY_MILESTONE_LEVEL,
    CHECKPOINT_INTERVAL_MINUTES,
    COLLECTIBLE_FALLBACK_TIER,
    MAX_DROP_CHANCE,
    MINIMUM_SESSION_MINUTES,
    SECONDS_PER_LEVEL,
    UNITS_PER_LEVEL,
    XP_PER_MINUTE,
    XP_PER_PLAYER_LEVEL,
)
from tomeloot.modules.shared.exceptions import CatalogError, ConfigurationError
from tomeloot.modules.shared.formulas import (
    calculate_completion_bonus,
    calculate_player_level,
    calculate_session_xp,
    distribute_levels,
    get_streak_multiplier,
    process_time,
    round_half_up,
)

if TYPE_CHECKING:
    from logging import Logger

    from tomeloot.core.config.manager import ConfigManager


def _new_box_id() -> str:
    return f"box_{uuid.uuid4().hex}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionRewardService(BaseService):
    """
    Session-end orchestrator.

    Public Methods
    --------------
    - process_session_end() -> Rewards for one finished session
    - open_loot_box() -> Resolve a stored box into a reward

    Args:
        config_manager: Balance configuration
        logger: Structured logger instance
        rng: Random source shared by every roll; seeded from RNG_SEED when omitted
        catalog: Consumable catalog; read from config when omitted
        id_factory: Loot box id generator
        clock: Returns the aware timestamp stamped on boxes and level-ups
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        logger: Logger,
        rng: Optional[RandomSource] = None,
        catalog: Optional[ConsumableCatalog] = None,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        super().__init__(config_manager, logger)

        try:
            self.catalog = catalog or ConsumableCatalog.from_config(config_manager)
            balance = LootBalance.from_config(config_manager)
        except (CatalogError, ConfigurationError) as exc:
            self.log_error("load_balance", exc)
            raise

        self.engine = LootEngine(
            rng if rng is not None else random.Random(Config.RNG_SEED),
            self.catalog,
            balance,
        )
        self.scheduler = CheckpointScheduler(
            self.engine,
            base_chance=self.get_float("drops.base_chance", BASE_CHECKPOINT_DROP_CHANCE),
            interval_minutes=self.get_int("drops.interval_minutes", CHECKPOINT_INTERVAL_MINUTES),
            minimum_minutes=self.get_int("drops.minimum_session_minutes", MINIMUM_SESSION_MINUTES),
            max_chance=self.get_float("drops.max_chance", MAX_DROP_CHANCE),
        )
        self._new_id = id_factory or _new_box_id
        self._now = clock or _utc_now

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def process_session_end(
        self,
        entity: TrackedEntity,
        progress: UserProgress,
        equipped_modifiers: Iterable[Modifier],
        session_seconds: float,
        is_completion: bool = False,
    ) -> SessionRewardResult:
        """
        Compute every reward for a finished session.

        Args:
            entity: Entity the session was logged against
            progress: User progress before the session
            equipped_modifiers: Currently equipped modifiers
            session_seconds: Session length, rounded to whole seconds; negative counts as 0
            is_completion: Whether the session completed the entity

        Returns:
            SessionRewardResult with new entity and progress snapshots

        Example:
            >>> result = service.process_session_end(entity, progress, [], 3600)
            >>> result.xp_gained
            600
        """
        now = self._now()
        session_seconds = round_half_up(max(0, session_seconds))
        seconds_per_level = self.get_int("leveling.seconds_per_level", SECONDS_PER_LEVEL)
        categories = entity.categories

        self.log_operation(
            "process_session_end",
            entity_id=entity.id,
            session_seconds=session_seconds,
            is_completion=is_completion,
        )

        # Step 1: effect totals
        effects = resolve_session_effects(
            equipped_modifiers, categories, progress.active_buffs, self.catalog
        )

        # Step 2: progression
        time_change = process_time(
            entity.progression.total_seconds, session_seconds, seconds_per_level
        )
        total_seconds_after = entity.progression.total_seconds + session_seconds

        completion_levels = 0
        if is_completion and session_seconds > 0:
            completion_levels = calculate_completion_bonus(
                total_seconds_after,
                entity.size,
                seconds_per_level,
                self.get_int("leveling.units_per_level", UNITS_PER_LEVEL),
            )

        instant_levels = progress.pending_instant_levels if session_seconds > 0 else 0
        levels_gained = time_change.levels_gained + completion_levels + instant_levels
        previous_level = entity.progression.level
        # Bonus levels ride on the time-derived level; they never compound.
        new_level = previous_level
        if session_seconds > 0:
            new_level = time_change.new_level + completion_levels + instant_levels

        # Step 3: XP
        streak_multiplier = get_streak_multiplier(progress.current_streak)
        base_xp, xp_gained = calculate_session_xp(
            session_seconds / 60,
            streak_multiplier,
            effects.xp_boost,
            self.get_int("xp.per_minute", XP_PER_MINUTE),
        )
        xp_per_level = self.get_int("xp.per_player_level", XP_PER_PLAYER_LEVEL)

        # Step 4: category distribution
        previous_category_levels = {
            category: progress.category_level(category) for category in categories
        }
        category_deltas = distribute_levels(levels_gained, categories)

        # Step 5: earned loot boxes
        sources = (
            [BoxSource.LEVEL_UP] * time_change.levels_gained
            + [BoxSource.COMPLETION] * completion_levels
            + [BoxSource.LEVEL_UP] * instant_levels
        )
        loot_boxes, pity_counter = self._earn_boxes(
            sources, effects, progress.pity_counter, entity.id, now
        )

        # Step 6: checkpoint drops
        session_minutes = int(session_seconds // 60)
        outcomes = self.scheduler.roll(
            session_minutes, effects.drop_rate_boost, entity.available_rarities()
        )
        bonus_drops, unlocked = self._resolve_drops(outcomes, entity, now)

        # Step 7: buffs, then dropped consumables
        next_progress = replace(
            progress,
            active_buffs=tick_buffs(progress.active_buffs, session_minutes),
        )
        for drop in bonus_drops:
            if drop.kind is DropKind.CONSUMABLE:
                next_progress = use_consumable(next_progress, drop.consumable, self.catalog, now)
        consolidated = consolidate_buffs(next_progress.active_buffs, self.catalog)

        # Step 8: snapshots
        updated_entity = self._update_entity(
            entity, session_seconds, new_level, levels_gained, unlocked, now
        )
        updated_progress = self._update_progress(
            next_progress,
            xp_gained=xp_gained,
            pity_counter=pity_counter,
            buffs=consolidated.buffs,
            categories=categories,
            category_deltas=category_deltas,
            collectibles_unlocked=len(unlocked),
            is_completion=is_completion,
            instant_levels_used=instant_levels,
            counted=session_seconds > 0,
        )

        self.log.info(
            f"Session rewards resolved for entity {entity.id}",
            extra={
                "entity_id": entity.id,
                "levels_gained": levels_gained,
                "xp_gained": xp_gained,
                "loot_boxes": len(loot_boxes),
                "bonus_drops": len(bonus_drops),
                "pity_counter": pity_counter,
            },
        )

        return SessionRewardResult(
            levels_gained=levels_gained,
            completion_levels=completion_levels,
            instant_levels=instant_levels,
            new_level=new_level,
            previous_level=previous_level,
            xp_gained=xp_gained,
            base_xp=base_xp,
            streak_multiplier=streak_multiplier,
            previous_player_level=calculate_player_level(progress.total_xp, xp_per_level),
            new_player_level=calculate_player_level(updated_progress.total_xp, xp_per_level),
            category_deltas=category_deltas,
            previous_category_levels=previous_category_levels,
            loot_boxes=tuple(loot_boxes),
            bonus_drops=tuple(bonus_drops),
            effects=effects,
            entity=updated_entity,
            progress=updated_progress,
        )

    def open_loot_box(
        self,
        box: LootBoxRecord,
        progress: UserProgress,
        equipped_modifiers: Iterable[Modifier] = (),
        entity: Optional[TrackedEntity] = None,
    ) -> BoxOpenResult:
        """
        Open a stored box with this service's engine and catalog.

        When `entity` is given its categories scope the modifiers and its
        pool decides whether a collectible can be rolled.
        """
        self.log_operation("open_loot_box", box_id=box.id, tier=box.tier.value if box.tier else None)
        scopes: Sequence[str] = entity.categories if entity is not None else ()
        collectible_available = entity.has_collectibles if entity is not None else True
        return open_loot_box(
            box,
            progress,
            equipped_modifiers,
            scopes,
            self.engine,
            self.catalog,
            collectible_available=collectible_available,
        )

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    def _earn_boxes(
        self,
        sources: Sequence[BoxSource],
        effects: EffectTotals,
        pity_counter: int,
        entity_id: str,
        now: datetime,
    ) -> Tuple[List[LootBoxRecord], int]:
        """Roll a tier for each earned box, threading the pity counter through."""
        boxes: List[LootBoxRecord] = []
        for source in sources:
            roll = self.engine.roll_box_tier_with_pity(
                effects.luck, effects.rare_luck, effects.legendary_luck, pity_counter
            )
            pity_counter = roll.pity_counter
            boxes.append(self._make_box(roll.tier, source, entity_id, now))
        return boxes, pity_counter

    def _make_box(
        self, tier: BoxTier, source: BoxSource, entity_id: str, now: datetime
    ) -> LootBoxRecord:
        return LootBoxRecord(
            id=self._new_id(),
            tier=tier,
            earned_at=now,
            source=source,
            owner_entity_id=entity_id,
        )

    def _resolve_drops(
        self, outcomes: Sequence[DropOutcome], entity: TrackedEntity, now: datetime
    ) -> Tuple[List[BonusDrop], List[Collectible]]:
        """
        Turn rolled outcomes into payloads.

        Collectible outcomes claim pool entries in order; once no locked
        entry of the rolled rarity is left they become loot boxes.
        """
        drops: List[BonusDrop] = []
        unlocked: List[Collectible] = []
        claimed = set()

        for outcome in outcomes:
            if outcome.kind is DropKind.CONSUMABLE:
                drops.append(
                    BonusDrop(
                        kind=DropKind.CONSUMABLE,
                        consumable=self.engine.pick_consumable(outcome.consumable_tier),
                    )
                )
                continue

            if outcome.kind is DropKind.LOOT_BOX:
                box = self._make_box(outcome.box_tier, BoxSource.BONUS_DROP, entity.id, now)
                drops.append(BonusDrop(kind=DropKind.LOOT_BOX, loot_box=box))
                continue

            collectible = _first_locked(entity.collectible_pool, outcome.rarity, claimed)
            if collectible is not None:
                claimed.add(collectible.id)
                collectible = replace(collectible, unlocked_at=now)
                unlocked.append(collectible)
                drops.append(
                    BonusDrop(
                        kind=DropKind.COLLECTIBLE,
                        collectible=collectible,
                        original_rarity=outcome.rarity,
                    )
                )
                continue

            fallback_tier = BoxTier(COLLECTIBLE_FALLBACK_TIER[outcome.rarity.value])
            self.log.debug(
                "Collectible drop fell back to loot box",
                extra={"rarity": outcome.rarity.value, "tier": fallback_tier.value},
            )
            drops.append(
                BonusDrop(
                    kind=DropKind.LOOT_BOX,
                    loot_box=self._make_box(fallback_tier, BoxSource.BONUS_DROP, entity.id, now),
                    original_rarity=outcome.rarity,
                    was_fallback=True,
                )
            )

        return drops, unlocked

    def _update_entity(
        self,
        entity: TrackedEntity,
        session_seconds: int,
        new_level: int,
        levels_gained: int,
        unlocked: Sequence[Collectible],
        now: datetime,
    ) -> TrackedEntity:
        progression = replace(
            entity.progression,
            level=new_level,
            total_seconds=entity.progression.total_seconds + session_seconds,
            level_up_timestamps=entity.progression.level_up_timestamps + (now,) * levels_gained,
        )
        if not unlocked:
            return replace(entity, progression=progression)

        unlocked_ids = {c.id for c in unlocked}
        return replace(
            entity,
            progression=progression,
            collectible_pool=tuple(c for c in entity.collectible_pool if c.id not in unlocked_ids),
            unlocked_collectibles=entity.unlocked_collectibles + tuple(unlocked),
        )

    def _update_progress(
        self,
        progress: UserProgress,
        xp_gained: int,
        pity_counter: int,
        buffs: Tuple[ActiveBuff, ...],
        categories: Sequence[str],
        category_deltas: Dict[str, int],
        collectibles_unlocked: int,
        is_completion: bool,
        instant_levels_used: int,
        counted: bool,
    ) -> UserProgress:
        """Fold the session into progress; zero-length sessions leave the counters alone."""
        milestone_level = self.get_int("leveling.category_milestone_level", CATEGORY_MILESTONE_LEVEL)
        levels = progress.category_level_map
        milestones = list(progress.category_milestones)
        categories_read = list(progress.categories_read)

        for category in categories if counted else ():
            before = levels.get(category, 0)
            after = before + category_deltas.get(category, 0)
            levels[category] = after
            if before < milestone_level <= after and category not in milestones:
                milestones.append(category)
            if category not in categories_read:
                categories_read.append(category)

        return replace(
            progress,
            total_xp=progress.total_xp + xp_gained,
            pity_counter=pity_counter,
            active_buffs=buffs,
            pending_instant_levels=progress.pending_instant_levels - instant_levels_used,
            category_levels=levels,
            sessions_completed=progress.sessions_completed + (1 if counted else 0),
            entities_completed=progress.entities_completed + (1 if counted and is_completion else 0),
            collectibles_collected=progress.collectibles_collected + collectibles_unlocked,
            categories_read=tuple(categories_read),
            category_milestones=tuple(milestones),
        )


def _first_locked(
    pool: Sequence[Collectible], rarity: CollectibleRarity, claimed: set
) -> Optional[Collectible]:
    for collectible in pool:
        if collectible.rarity is rarity and not collectible.is_unlocked and collectible.id not in claimed:
            return collectible
    return None
