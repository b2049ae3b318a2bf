"""
ConfigManager: hierarchical balance configuration access for TomeLoot.

Purpose
-------
- Provide dot-notation access to tunable balance values (odds, pity, XP rates,
  checkpoint timing, the consumable catalog).
- Back configuration with YAML defaults from the `config/` directory.
- Allow explicit in-process overrides so tests and callers can thread
  alternative balance values into the engine without touching files.

Responsibilities
----------------
- Load and deep-merge every YAML file under `Config.CONFIG_DIR`.
- Serve reads from an in-memory cache, falling back to YAML defaults.
- Apply overrides through registered validators.

Key Design Decisions
--------------------
- YAML is the single source for defaults; overrides live only in memory.
- The engine never reads configuration implicitly: services receive the
  manager through their constructor and read keys explicitly.
- A missing `config/` directory is not an error; code-level constants are
  used instead.

Dependencies
------------
- PyYAML: YAML parsing (`yaml.safe_load`)
- `tomeloot.core.config.config.Config`: config directory location
- `tomeloot.core.logging.logger.get_logger`: structured logging
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable, Dict, List, MutableMapping, Optional

import yaml

from tomeloot.core.config.config import Config
from tomeloot.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Exceptions
# ============================================================================


class ConfigManagerError(RuntimeError):
    """Base error type for ConfigManager-related failures."""


class ConfigInitializationError(ConfigManagerError):
    """Raised when ConfigManager cannot load its YAML sources."""


class ConfigWriteError(ConfigManagerError):
    """Raised when a configuration override fails validation."""


__all__ = ["ConfigManager", "ConfigManagerError", "ConfigInitializationError", "ConfigWriteError"]


# ============================================================================
# ConfigManager
# ============================================================================


class ConfigManager:
    """
    Balance configuration with YAML defaults and in-memory overrides.

    Features
    --------
    - Hierarchical config access with dot notation (e.g. `"pity.hard_cap"`).
    - Deep-merged YAML defaults from every file in the config directory.
    - Validated overrides for tests and embedding applications.
    """

    # Materialized configuration (defaults + overrides).
    _cache: Dict[str, Any] = {}

    # YAML defaults as loaded from disk.
    _defaults: Dict[str, Any] = {}

    _initialized: bool = False
    _config_dir: Optional[Path] = None

    # Optional validators: full dot key -> callable(value) -> value
    _validators: Dict[str, Callable[[Any], Any]] = {}

    # =========================================================================
    # YAML LOADING & DEFAULTS
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = value

    @classmethod
    def _load_yaml_configs(cls, config_dir: Path, strict: bool) -> int:
        """
        Load all YAML config files from `config_dir` into `_defaults`.

        Files are merged in sorted path order so the result is stable.
        With `strict`, an unreadable or malformed file raises
        `ConfigInitializationError`; otherwise it is logged and skipped.
        """
        if not config_dir.exists():
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return 0

        yaml_files = sorted(
            list(config_dir.rglob("*.yaml")) + list(config_dir.rglob("*.yml"))
        )
        loaded_count = 0

        for yaml_file in yaml_files:
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                logger.warning(
                    "Failed to load YAML config",
                    extra={
                        "file": str(yaml_file.relative_to(config_dir)),
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                )
                if strict:
                    raise ConfigInitializationError(
                        f"Could not load config file {yaml_file}"
                    ) from exc
                continue

            if isinstance(data, dict):
                cls._deep_merge_dict(cls._defaults, data)
                loaded_count += 1
                logger.debug(
                    "Loaded YAML config",
                    extra={"file": str(yaml_file.relative_to(config_dir))},
                )
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={
                        "file": str(yaml_file.relative_to(config_dir)),
                        "root_type": type(data).__name__,
                    },
                )

        return loaded_count

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @classmethod
    def initialize(cls, config_dir: Optional[Path] = None, strict: bool = False) -> None:
        """
        Load YAML defaults and reset the cache.

        Parameters
        ----------
        config_dir:
            Directory to scan; defaults to `Config.CONFIG_DIR`.
        strict:
            Raise `ConfigInitializationError` on unreadable files.
        """
        cls._defaults = {}
        cls._config_dir = Path(config_dir) if config_dir is not None else Config.CONFIG_DIR

        loaded = cls._load_yaml_configs(cls._config_dir, strict)

        cls._cache = copy.deepcopy(cls._defaults)
        cls._initialized = True

        logger.info(
            "ConfigManager initialized",
            extra={
                "config_dir": str(cls._config_dir),
                "yaml_file_count": loaded,
                "total_cache_keys": len(cls._cache),
            },
        )

    @classmethod
    def reset(cls) -> None:
        """Drop all state; the next read lazily re-initializes."""
        cls._cache = {}
        cls._defaults = {}
        cls._validators = {}
        cls._initialized = False
        cls._config_dir = None

    @classmethod
    def _ensure_initialized(cls) -> None:
        if not cls._initialized:
            logger.debug("ConfigManager accessed before explicit initialization; loading defaults")
            cls.initialize()

    # =========================================================================
    # VALIDATION HOOKS
    # =========================================================================

    @classmethod
    def register_validator(cls, key: str, validator: Callable[[Any], Any]) -> None:
        """
        Register a validator for a specific configuration key path.

        Validators run on `set` and must return the (possibly transformed)
        value or raise to block the write.
        """
        cls._validators[key] = validator
        logger.debug(
            "ConfigManager validator registered",
            extra={
                "config_key": key,
                "validator": getattr(validator, "__name__", "anonymous"),
            },
        )

    @classmethod
    def _apply_validator(cls, key: str, value: Any) -> Any:
        validator = cls._validators.get(key)
        if not validator:
            return value

        try:
            return validator(value)
        except Exception as exc:
            logger.error(
                "Config validation failed",
                extra={
                    "config_key": key,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise ConfigWriteError(f"Validation failed for config key '{key}'") from exc

    # =========================================================================
    # READ API
    # =========================================================================

    @staticmethod
    def _traverse(source: Dict[str, Any], key: str) -> Any:
        value: Any = source
        for part in key.split("."):
            if not isinstance(value, dict):
                return None
            value = value.get(part)
            if value is None:
                return None
        return value

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Examples
        --------
        >>> hard_cap = ConfigManager.get("pity.hard_cap", 25)
        >>> odds = ConfigManager.get("loot.box_tier_odds")
        """
        cls._ensure_initialized()

        value = cls._traverse(cls._cache, key)
        if value is None:
            value = cls._traverse(cls._defaults, key)
        if value is None:
            return default
        return value

    @classmethod
    def get_all_keys(cls) -> List[str]:
        cls._ensure_initialized()
        return list(cls._cache.keys())

    # =========================================================================
    # WRITE API
    # =========================================================================

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """
        Override a configuration value in memory.

        Raises
        ------
        ConfigWriteError
            If a registered validator rejects the value or the path
            crosses a non-mapping value.
        """
        cls._ensure_initialized()
        value = cls._apply_validator(key, value)

        parts = key.split(".")
        node: Any = cls._cache
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ConfigWriteError(
                    f"Cannot set '{key}': '{part}' is not a mapping"
                )
            node = child
        node[parts[-1]] = value

        logger.info(
            "Config override applied",
            extra={"config_key": key, "value_type": type(value).__name__},
        )

    @classmethod
    def clear_overrides(cls) -> None:
        """Restore the cache to the YAML defaults."""
        cls._cache = copy.deepcopy(cls._defaults)

    @classmethod
    def health_snapshot(cls) -> Dict[str, Any]:
        return {
            "initialized": cls._initialized,
            "config_dir": str(cls._config_dir) if cls._config_dir else None,
            "default_keys": len(cls._defaults),
            "cache_keys": len(cls._cache),
            "validators": len(cls._validators),
        }
