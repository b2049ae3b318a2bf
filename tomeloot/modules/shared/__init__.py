"""
TomeLoot Shared Module

Purpose
-------
Domain-level foundations for every game module:
- Domain exceptions and error severity
- BaseService (config access and structured logging)
- Gameplay constants and pure formulas

Usage
-----
    from tomeloot.modules.shared import BaseService, calculate_session_xp
"""

from __future__ import annotations

from .base_service import BaseService
from .exceptions import (
    CatalogError,
    ConfigurationError,
    ErrorSeverity,
    NotFoundError,
    TomeLootException,
    get_error_severity,
    should_alert,
)
from .formulas import (
    LevelChange,
    StreakMultiplierInfo,
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

__all__ = [
    "BaseService",
    "CatalogError",
    "ConfigurationError",
    "ErrorSeverity",
    "NotFoundError",
    "TomeLootException",
    "get_error_severity",
    "should_alert",
    "LevelChange",
    "StreakMultiplierInfo",
    "calculate_completion_bonus",
    "calculate_level",
    "calculate_player_level",
    "calculate_session_xp",
    "calculate_size_floor",
    "distribute_levels",
    "get_streak_multiplier",
    "get_streak_multiplier_info",
    "process_time",
    "round_half_up",
    "xp_progress",
]
