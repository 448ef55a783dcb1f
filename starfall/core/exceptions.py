"""
Infrastructure exceptions for the Starfall progression engine.

Purpose
-------
Define the structured exception hierarchy for infrastructure-level concerns:
record service failures, malformed reference content, configuration errors,
cache failures, and open circuit breakers. These abort the running handler
and propagate to the caller; they are never translated into a player-facing
`errorMessage`.

Design Notes
------------
- All infrastructure exceptions inherit from `StarfallInfrastructureException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: hint for the caller; the engine itself never retries
  - `error_code`: short, stable identifier for programmatic use
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"
    INFO = "info"  # Normal operation (e.g., rejected combat submissions)
    WARNING = "warning"  # Concerning but handled (e.g., cache degraded)
    ERROR = "error"
    CRITICAL = "critical"  # Engine cannot serve requests at all


class StarfallInfrastructureException(Exception):
    """
    Base exception for all Starfall infrastructure-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation could safely be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise StarfallInfrastructureException(
        ...     "Record service unreachable",
        ...     {"api": "GetUserData"}
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


class ConfigurationError(StarfallInfrastructureException):
    """
    Raised when a configuration key is invalid or missing.

    Args:
        config_key: The configuration key that has issues
        message: Description of the configuration problem
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL
    DEFAULT_RETRYABLE = False

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        error_message = f"Configuration error for {config_key}: {message}"
        super().__init__(
            error_message,
            details={
                "config_key": config_key,
                "message": message,
            },
            error_code="CONFIG_ERROR",
        )


class RecordStoreError(StarfallInfrastructureException):
    """
    Raised when a call to the player record service fails.

    Covers transport failures, timeouts, non-200 responses and error
    envelopes returned by the service. A failed grant may or may not have
    been applied remotely, so callers must not blindly retry.

    Args:
        api: Name of the remote API that failed (e.g. "GrantItemsToUser")
        message: Description of the failure
        status_code: HTTP status, when a response was received
        original_error: The underlying exception, when there is one
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE = False

    def __init__(
        self,
        api: str,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.api = api
        self.status_code = status_code
        self.original_error = original_error
        super().__init__(
            f"Record store error during {api}: {message}",
            details={
                "api": api,
                "status_code": status_code,
                "error_type": (
                    type(original_error).__name__ if original_error else None
                ),
            },
            error_code="RECORD_STORE_ERROR",
        )


class ReferenceDataError(StarfallInfrastructureException):
    """
    Raised when reference (title) data is missing or malformed.

    Reference content is authored by the game team, so an inconsistency
    here is an operational defect rather than a player mistake.

    Args:
        key: Title data key or entity involved
        message: Description of the problem
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE = False

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(
            f"Reference data error for {key}: {message}",
            details={"key": key, "message": message},
            error_code="REFERENCE_DATA_ERROR",
        )


class CacheError(StarfallInfrastructureException):
    """
    Raised when cache operations fail.

    Args:
        operation: Description of the cache operation that failed
        cache_key: The cache key involved in the failure
        original_error: The underlying exception (if any)
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(
        self,
        operation: str,
        cache_key: str,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.operation = operation
        self.cache_key = cache_key
        self.original_error = original_error
        error_msg = str(original_error) if original_error else "Cache operation failed"
        super().__init__(
            f"Cache error during {operation} for key '{cache_key}': {error_msg}",
            details={
                "operation": operation,
                "cache_key": cache_key,
                "error": error_msg,
                "error_type": (
                    type(original_error).__name__ if original_error else None
                ),
            },
            error_code="CACHE_ERROR",
        )


class CircuitBreakerError(StarfallInfrastructureException):
    """
    Raised when a circuit breaker is open and blocking calls.

    Args:
        service: Name of the guarded service
        failure_count: Number of consecutive failures that opened the circuit
        retry_after: Seconds until the circuit allows a probe call
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(self, service: str, failure_count: int, retry_after: float) -> None:
        self.service = service
        self.failure_count = failure_count
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker open for {service} "
            f"({failure_count} failures, retry after {retry_after:.1f}s)",
            details={
                "service": service,
                "failure_count": failure_count,
                "retry_after": retry_after,
            },
            error_code="CIRCUIT_BREAKER_OPEN",
        )
