"""
Static configuration management for TomeLoot.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults and type validation. This module handles settings that
are fixed at process start (environment, logging, file locations).

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to static configuration values
- Track which values came from the environment versus defaults

Non-Responsibilities
--------------------
- Balance values and catalogs (handled by ConfigManager from YAML)
- Runtime configuration changes (except `reload`)
- Persistence of any kind

Environment Variables
---------------------
- ENVIRONMENT: Environment type (default: development)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON: Force JSON console logs (default: production only)
- LOG_COLORS: Colored console logs in development (default: True)
- LOG_TO_FILE: Enable the rotating JSON log file (default: False)
- LOGS_DIR: Directory for log files (default: <project>/logs)
- CONFIG_DIR: Directory holding balance YAML files (default: <project>/config)
- RNG_SEED: Optional integer seed for the default random source

Dependencies
------------
- python-dotenv: Environment variable loading
- pathlib: Cross-platform path handling
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[3]


# ============================================================================
# Enums
# ============================================================================


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logger is not configured yet at this point
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


# ============================================================================
# Configuration Metrics Tracker
# ============================================================================


class _ConfigLoadMetrics:
    """Tracks which configuration values came from the environment."""

    def __init__(self):
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}

    def record_env_load(self, key: str, from_env: bool, default: Any):
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str):
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
        }


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Centralized static configuration for TomeLoot.

    Values are class attributes populated by `load()`; the class is never
    instantiated.
    """

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True
    LOG_TO_FILE: bool = False
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    RNG_SEED: Optional[int] = None

    _metrics: Optional[_ConfigLoadMetrics] = None
    _loaded: bool = False

    # =========================================================================
    # Safe parsers
    # =========================================================================

    @classmethod
    def _init_metrics(cls):
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        cls._init_metrics()

        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            error = f"{key}='{raw_value}' is not a valid boolean, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        cls._init_metrics()

        value = os.getenv(key, default)
        cls._metrics.record_env_load(key, key in os.environ, default)
        return value

    @classmethod
    def _safe_optional_int(cls, key: str) -> Optional[int]:
        """Parse an optional integer; invalid values are logged and ignored."""
        cls._init_metrics()

        raw_value = os.getenv(key)
        if raw_value is None or not raw_value.strip():
            cls._metrics.record_env_load(key, False, None)
            return None

        try:
            value = int(raw_value)
        except ValueError:
            error = f"{key}='{raw_value}' is not a valid integer, ignoring"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return None

        cls._metrics.record_env_load(key, True, None)
        return value

    @classmethod
    def _safe_path(cls, key: str, default: Path) -> Path:
        raw_value = cls._safe_str(key, str(default))
        path = Path(raw_value)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables.

        Called automatically on module import; call again after changing the
        environment (tests do this through `reload`).
        """
        cls._metrics = _ConfigLoadMetrics()

        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("ENVIRONMENT", "development")
        ).value

        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO").upper()
        if cls.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            logging.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
            cls._metrics.record_validation_error("LOG_LEVEL", cls.LOG_LEVEL)
            cls.LOG_LEVEL = "INFO"

        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)
        cls.LOG_COLORS = bool(cls._safe_bool("LOG_COLORS", True))
        cls.LOG_TO_FILE = bool(cls._safe_bool("LOG_TO_FILE", False))
        cls.LOGS_DIR = cls._safe_path("LOGS_DIR", PROJECT_ROOT / "logs")
        cls.CONFIG_DIR = cls._safe_path("CONFIG_DIR", PROJECT_ROOT / "config")
        cls.RNG_SEED = cls._safe_optional_int("RNG_SEED")

        cls._loaded = True

    @classmethod
    def reload(cls) -> None:
        cls.load()
        logging.getLogger(__name__).info(
            "Static configuration reloaded", extra=cls.get_config_summary()
        )

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == Environment.PRODUCTION.value

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == Environment.DEVELOPMENT.value

    @classmethod
    def is_testing(cls) -> bool:
        return cls.ENVIRONMENT == Environment.TESTING.value

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """
        Get configuration summary for debugging.

        Example
        -------
        >>> Config.get_config_summary()["environment"]
        'development'
        """
        return {
            "environment": cls.ENVIRONMENT,
            "log_level": cls.LOG_LEVEL,
            "log_json": cls.LOG_JSON,
            "log_to_file": cls.LOG_TO_FILE,
            "logs_dir": str(cls.LOGS_DIR),
            "config_dir": str(cls.CONFIG_DIR),
            "rng_seed_set": cls.RNG_SEED is not None,
        }


Config.load()
