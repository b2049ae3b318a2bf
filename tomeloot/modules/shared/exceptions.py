"""
Domain exceptions for TomeLoot.

Purpose
-------
Define the structured exception hierarchy for the reward engine. The engine
paths themselves clamp bad numbers instead of raising; these exceptions cover
what cannot be clamped: broken balance configuration, malformed catalogs,
and explicit lookups the caller asked to be strict.

Design Notes
------------
- All domain exceptions inherit from `TomeLootException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict-like)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class TomeLootException(Exception):
    """
    Base exception for all TomeLoot domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise TomeLootException(
        ...     "Catalog load failed",
        ...     {"source": "consumables.yaml"}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class ConfigurationError(TomeLootException):
    """
    Raised when a balance value is missing or unusable.

    Args:
        key: Dot-notation config key
        reason: What is wrong with it
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(
            reason,
            details={"config_key": key},
            error_code="CONFIGURATION_INVALID",
        )


class CatalogError(TomeLootException):
    """
    Raised when a consumable catalog cannot be built.

    Args:
        reason: Explanation of the problem
        entry_id: Offending entry, when one can be named
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, reason: str, entry_id: Optional[str] = None) -> None:
        self.reason = reason
        self.entry_id = entry_id
        super().__init__(
            f"Invalid consumable catalog: {reason}",
            details={"entry_id": entry_id} if entry_id else {},
            error_code="CATALOG_INVALID",
        )


class NotFoundError(TomeLootException):
    """
    Raised by strict lookups when an identifier is unknown.

    Engine paths never raise this; they treat unknown ids as no-ops.

    Args:
        resource_type: Type of resource (e.g., "Consumable")
        identifier: The identifier that was not found
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """
    Get the severity level of an exception for logging.

    Returns:
        ErrorSeverity level; unknown exceptions count as ERROR.
    """
    if isinstance(exc, TomeLootException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """True if severity is ERROR or CRITICAL."""
    return get_error_severity(exc) in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
