"""
Consumable catalog.

A read-only lookup of consumable definitions by id and tier. Engine code
only ever calls `get`, which returns None for unknown ids so stale buff
entries contribute nothing instead of failing a session.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from tomeloot.core.logging.logger import get_logger
from tomeloot.domain.models import ConsumableDefinition, ConsumableTier, DomainValidationError, EffectType
from tomeloot.modules.shared.exceptions import CatalogError, NotFoundError

logger = get_logger(__name__)

# id, name, description, tier, effect, magnitude, duration (minutes, 0 = instant)
_DEFAULT_ROWS: Tuple[Tuple[str, str, str, str, str, float, int], ...] = (
    ("weak_xp_1", "Minor XP Scroll", "+10% XP for 60 min", "weak", "xp_boost", 0.10, 60),
    ("weak_luck_1", "Lucky Penny", "+5% luck for 2 hours", "weak", "luck", 0.05, 120),
    ("weak_drop_1", "Treasure Map Scrap", "+10% drop rate for 60 min", "weak", "drop_rate_boost", 0.10, 60),
    ("weak_streak_1", "Calendar Page", "24h streak protection", "weak", "streak_shield", 1, 0),
    ("med_xp_1", "XP Scroll", "+25% XP for 90 min", "medium", "xp_boost", 0.25, 90),
    ("med_luck_1", "Four-Leaf Clover", "+10% luck for 3 hours", "medium", "luck", 0.10, 180),
    ("med_rare_luck_1", "Silver Horseshoe", "+10% rare luck for 3 hours", "medium", "rare_luck", 0.10, 180),
    ("med_drop_1", "Treasure Map", "+20% drop rate for 2 hours", "medium", "drop_rate_boost", 0.20, 120),
    ("med_streak_1", "Calendar", "72h streak protection", "medium", "streak_shield", 3, 0),
    ("med_upgrade_1", "Polish Kit", "Upgrade next box tier", "medium", "box_upgrade", 1, 0),
    ("strong_xp_1", "Double XP Tome", "Double XP for 90 min", "strong", "xp_boost", 1.0, 90),
    ("strong_xp_2", "XP Blessing", "+50% XP for 4 hours", "strong", "xp_boost", 0.50, 240),
    ("strong_luck_1", "Luck Charm", "+15% luck for 5 hours", "strong", "luck", 0.15, 300),
    ("strong_rare_luck_1", "Silver Star", "+10% rare luck for 5 hours", "strong", "rare_luck", 0.10, 300),
    ("strong_legendary_luck_1", "Golden Aura", "+15% legendary luck for 5 hours", "strong", "legendary_luck", 0.15, 300),
    ("strong_collectible_1", "Companion Summon", "Guaranteed collectible on next box", "strong", "guaranteed_collectible", 1, 0),
    ("strong_level_1", "Time Warp", "Level up book on next session", "strong", "instant_level", 1, 0),
)


class ConsumableCatalog:
    """
    Immutable collection of consumable definitions.

    Args:
        definitions: Definitions in display order; ids must be unique

    Raises:
        CatalogError: On duplicate ids or a tier without definitions
    """

    def __init__(self, definitions: Iterable[ConsumableDefinition]) -> None:
        self._by_id: Dict[str, ConsumableDefinition] = {}
        for definition in definitions:
            if definition.id in self._by_id:
                raise CatalogError("duplicate consumable id", entry_id=definition.id)
            self._by_id[definition.id] = definition

        if not self._by_id:
            raise CatalogError("catalog has no definitions")

        self._by_tier: Dict[ConsumableTier, Tuple[ConsumableDefinition, ...]] = {
            tier: tuple(d for d in self._by_id.values() if d.tier is tier)
            for tier in ConsumableTier
        }
        # Loot rolls pick within a tier, so every tier needs an entry
        for tier, members in self._by_tier.items():
            if not members:
                raise CatalogError(f"tier '{tier.value}' has no definitions")

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def default(cls) -> "ConsumableCatalog":
        """The built-in seventeen-entry catalog."""
        return cls(
            ConsumableDefinition(
                id=row[0],
                name=row[1],
                description=row[2],
                tier=ConsumableTier(row[3]),
                effect_type=EffectType(row[4]),
                magnitude=row[5],
                duration=row[6],
            )
            for row in _DEFAULT_ROWS
        )

    @classmethod
    def from_entries(cls, entries: Iterable[Mapping[str, Any]]) -> "ConsumableCatalog":
        """
        Build a catalog from plain mappings (as loaded from YAML).

        Raises:
            CatalogError: If an entry is missing a field or fails validation
        """
        definitions: List[ConsumableDefinition] = []
        for index, entry in enumerate(entries):
            entry_id = entry.get("id") if isinstance(entry, Mapping) else None
            try:
                definitions.append(
                    ConsumableDefinition(
                        id=entry["id"],
                        name=entry.get("name", entry["id"]),
                        description=entry.get("description", ""),
                        tier=ConsumableTier(entry["tier"]),
                        effect_type=EffectType(entry["effect_type"]),
                        magnitude=float(entry["magnitude"]),
                        duration=int(entry.get("duration", 0)),
                    )
                )
            except (KeyError, TypeError, ValueError, DomainValidationError) as exc:
                raise CatalogError(
                    f"entry {index} is invalid: {exc}", entry_id=entry_id
                ) from exc
        return cls(definitions)

    @classmethod
    def from_config(cls, config_manager: Any) -> "ConsumableCatalog":
        """
        Load `consumables.definitions` from config, or the built-in catalog
        when the key is absent.
        """
        entries = config_manager.get("consumables.definitions")
        if not entries:
            logger.debug("No consumable catalog in config; using built-in definitions")
            return cls.default()

        catalog = cls.from_entries(entries)
        logger.info("Consumable catalog loaded from config", extra={"definitions": len(catalog)})
        return catalog

    # =========================================================================
    # Lookups
    # =========================================================================

    def get(self, definition_id: str) -> Optional[ConsumableDefinition]:
        return self._by_id.get(definition_id)

    def require(self, definition_id: str) -> ConsumableDefinition:
        """Strict lookup for callers acting on user input."""
        definition = self._by_id.get(definition_id)
        if definition is None:
            raise NotFoundError("Consumable", definition_id)
        return definition

    def by_tier(self, tier: ConsumableTier) -> Tuple[ConsumableDefinition, ...]:
        return self._by_tier.get(ConsumableTier(tier), ())

    def effect_of(self, definition_id: str) -> Optional[EffectType]:
        definition = self._by_id.get(definition_id)
        return definition.effect_type if definition else None

    def __contains__(self, definition_id: object) -> bool:
        return definition_id in self._by_id

    def __iter__(self) -> Iterator[ConsumableDefinition]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)
