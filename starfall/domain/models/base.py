"""
Base domain model helpers for Starfall.

Purpose
-------
Shared validation primitives for the frozen dataclasses under
`starfall.domain.models`. Models call these from `__post_init__` so an
invalid instance can never be constructed.

Non-Responsibilities
--------------------
- Persistence (handled by `starfall.modules.shared.base_repository`)
- Translating failures into handler responses (handled by services)
"""

from __future__ import annotations

from typing import Optional, Union

Number = Union[int, float]


class DomainValidationError(Exception):
    """
    Exception raised when domain model validation fails.

    Parameters
    ----------
    message : str
        Human-readable error message
    field : Optional[str]
        Field name that failed validation (if applicable)
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_positive(value: Number, field_name: str) -> None:
    if value <= 0:
        raise DomainValidationError(
            f"{field_name} must be positive, got {value}",
            field=field_name,
        )


def validate_non_negative(value: Number, field_name: str) -> None:
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}",
            field=field_name,
        )


def validate_probability(value: Number, field_name: str) -> None:
    """Validate that a value lies in the closed interval [0, 1]."""
    if not (0 <= value <= 1):
        raise DomainValidationError(
            f"{field_name} must be between 0 and 1, got {value}",
            field=field_name,
        )


def validate_not_empty(value: str, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise DomainValidationError(
            f"{field_name} cannot be empty",
            field=field_name,
        )


def require_number(value: object, field_name: str) -> Number:
    """
    Return `value` if it is a real number, else raise.

    JSON booleans decode to `bool`, a subclass of `int`; they are rejected
    explicitly so `true` is never read as 1 experience point.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DomainValidationError(
            f"{field_name} must be a number, got {type(value).__name__}",
            field=field_name,
        )
    return value


def require_integer(value: object, field_name: str) -> int:
    """
    Return `value` as an `int` if it is a whole number, else raise.

    Player statistics are stored as integers, so reference values that feed
    them must be whole; `2.0` is accepted as 2, `2.5` is rejected.
    """
    number = require_number(value, field_name)
    if isinstance(number, float) and not number.is_integer():
        raise DomainValidationError(
            f"{field_name} must be a whole number, got {number}",
            field=field_name,
        )
    return int(number)
