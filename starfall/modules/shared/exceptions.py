"""
Domain exceptions for the Starfall progression engine.

Purpose
-------
Define the exception hierarchy for game-logic failures: malformed handler
payloads, unknown handlers, and requests that violate game rules. The
handler registry translates these into `{"isError": true, "errorMessage": ...}`
responses; they never abort the process.

Design Notes
------------
- All domain exceptions inherit from `StarfallDomainException`.
- Severity defaults to INFO: a rejected request is normal operation.
- Combat validation failures (unknown planet, area, or enemy group) are not
  raised at all; `CombatService` returns them as an error response.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from starfall.core.exceptions import ErrorSeverity


class StarfallDomainException(Exception):
    """
    Base exception for all Starfall domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the request can be re-sent unchanged
        error_code: Optional code for programmatic handling
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.INFO
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


class ValidationError(StarfallDomainException):
    """
    Raised when a handler payload fails validation.

    Args:
        field: Name of the payload field that failed validation
        message: Explanation of why validation failed
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={
                "field": field,
                "validation_message": message,
            },
            error_code=f"VALIDATION_{field.upper()}",
        )


class NotFoundError(StarfallDomainException):
    """
    Raised when a requested resource does not exist.

    Args:
        resource_type: Type of resource (e.g., "Handler")
        identifier: Optional identifier for the missing resource
    """

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={
                "resource_type": resource_type,
                "identifier": identifier,
            },
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )
