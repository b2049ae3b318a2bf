"""
Base Service Foundation

Purpose
-------
Provides the foundational class for TomeLoot services: structured logging
and explicit configuration access. The engine has no event bus and no I/O,
so services only need these two collaborators.

What this class does NOT do:
- Randomness (services take an injectable random source themselves)
- Persistence (callers store the snapshots services return)

Usage
-----
    class SessionRewardService(BaseService):
        def __init__(self, config_manager, logger, rng=None):
            super().__init__(config_manager, logger)
            self.rng = rng or random.Random()
"""

from __future__ import annotations

from logging import Logger
from typing import Any, Optional, Type

from tomeloot.core.config.manager import ConfigManager
from tomeloot.modules.shared.exceptions import ConfigurationError, ErrorSeverity, get_error_severity

_SEVERITY_LEVELS = {
    ErrorSeverity.DEBUG: "debug",
    ErrorSeverity.INFO: "info",
    ErrorSeverity.WARNING: "warning",
    ErrorSeverity.ERROR: "error",
    ErrorSeverity.CRITICAL: "critical",
}


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Balance configuration (the ConfigManager class or a
            compatible object with `get(key, default)`)
        logger: Structured logger instance
    """

    def __init__(self, config_manager: Type[ConfigManager], logger: Logger) -> None:
        self._config = config_manager
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Safely retrieve configuration value.

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(key, f"Required configuration key '{key}' is missing")
        return value

    def get_float(self, key: str, default: float) -> float:
        """Numeric config read; a non-numeric value is a configuration error."""
        value = self.get_config(key, default)
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(key, f"'{key}' must be numeric, got {value!r}") from exc

    def get_int(self, key: str, default: int) -> int:
        value = self.get_config(key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
            raise ConfigurationError(key, f"'{key}' must be an integer, got {value!r}")
        return int(value)

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log a service operation with structured context.

        Args:
            operation: Name of the operation being performed
            **context: Additional context data
        """
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(self, operation: str, error: Exception, **context: Any) -> None:
        """
        Log a service error at the level matching its severity.

        Args:
            operation: Name of the operation that failed
            error: The exception that occurred
            **context: Additional context data
        """
        level = _SEVERITY_LEVELS[get_error_severity(error)]
        getattr(self.log, level)(
            f"Service error during {operation}: {error}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_message": str(error),
                **context,
            },
        )
