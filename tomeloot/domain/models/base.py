"""
Base validation helpers for TomeLoot domain models.

Purpose
-------
Domain values are frozen dataclasses that validate their own invariants in
`__post_init__`. This module provides the shared error type and the small
validator functions they call.

Non-Responsibilities
--------------------
- Clamping engine inputs (the engine clamps session time, boosts and luck
  instead of rejecting them; only structurally invalid records raise)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

Number = Union[int, float]


class DomainValidationError(Exception):
    """
    Exception raised when domain model validation fails.

    This is the base exception for all invariant violations in domain models.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize validation error.

        Parameters
        ----------
        message : str
            Human-readable error message
        field : Optional[str]
            Field name that failed validation (if applicable)
        """
        super().__init__(message)
        self.field = field


def validate_positive(value: Number, field_name: str) -> None:
    """
    Validate that a value is positive.

    Raises
    ------
    DomainValidationError
        If value is not positive
    """
    if value <= 0:
        raise DomainValidationError(
            f"{field_name} must be positive, got {value}",
            field=field_name,
        )


def validate_non_negative(value: Number, field_name: str) -> None:
    """
    Validate that a value is non-negative.

    Raises
    ------
    DomainValidationError
        If value is negative
    """
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}",
            field=field_name,
        )


def validate_range(value: Number, min_val: Number, max_val: Number, field_name: str) -> None:
    """
    Validate that a value is within an inclusive range.

    Raises
    ------
    DomainValidationError
        If value is outside the range
    """
    if not (min_val <= value <= max_val):
        raise DomainValidationError(
            f"{field_name} must be between {min_val} and {max_val}, got {value}",
            field=field_name,
        )


def validate_not_empty(value: str, field_name: str) -> None:
    """
    Validate that a string is not empty.

    Raises
    ------
    DomainValidationError
        If value is empty or whitespace-only
    """
    if not value or not value.strip():
        raise DomainValidationError(
            f"{field_name} cannot be empty",
            field=field_name,
        )


def validate_aware(value: Optional[datetime], field_name: str) -> None:
    """Reject naive datetimes; every timestamp in the engine is UTC-aware."""
    if value is not None and value.tzinfo is None:
        raise DomainValidationError(
            f"{field_name} must be timezone-aware",
            field=field_name,
        )
