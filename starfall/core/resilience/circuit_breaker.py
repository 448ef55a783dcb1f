"""
Circuit Breaker for Record Service Calls
========================================

Purpose
-------
Fail fast while the remote record service is unavailable instead of letting
every handler invocation wait out a full HTTP timeout.

Responsibilities
----------------
- Count consecutive failures of guarded calls
- Open the circuit once the failure threshold is reached
- After the recovery timeout, let a limited number of probe calls through
- Close the circuit again on the first successful probe

Non-Responsibilities
--------------------
- Retrying. A rejected or failed call is reported to the caller and never
  re-issued; re-sending a grant could double-grant items.
- Classifying errors. Every exception raised by the guarded call counts as
  a failure.

Circuit States
--------------
**CLOSED**: calls pass through, failures are counted.
**OPEN**: calls are rejected with `CircuitBreakerError`.
**HALF_OPEN**: up to `half_open_max_requests` probes pass through.

Configuration
-------------
- CIRCUIT_BREAKER_FAILURE_THRESHOLD (default: 5)
- CIRCUIT_BREAKER_RECOVERY_TIMEOUT_MS (default: 60000)
- CIRCUIT_BREAKER_HALF_OPEN_MAX_REQUESTS (default: 3)

Usage Example
-------------
>>> breaker = CircuitBreaker("playfab")
>>> data = await breaker.call(client.post, "GetUserData", body)
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from starfall.core.config.config import Config
from starfall.core.exceptions import CircuitBreakerError
from starfall.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerMetrics:
    """Snapshot of breaker state for health reporting."""

    name: str
    state: CircuitState
    failure_count: int
    success_count: int
    consecutive_failures: int
    total_requests: int
    rejected_requests: int


class CircuitBreaker:
    """
    Async circuit breaker.

    State is guarded by an asyncio.Lock; the guarded call itself runs
    outside the lock so slow calls do not serialize each other.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: Optional[int] = None,
        recovery_timeout_ms: Optional[int] = None,
        half_open_max_requests: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._failure_threshold = failure_threshold or int(
            getattr(Config, "CIRCUIT_BREAKER_FAILURE_THRESHOLD", 5)
        )
        self._recovery_timeout_ms = recovery_timeout_ms or int(
            getattr(Config, "CIRCUIT_BREAKER_RECOVERY_TIMEOUT_MS", 60_000)
        )
        self._half_open_max_requests = half_open_max_requests or int(
            getattr(Config, "CIRCUIT_BREAKER_HALF_OPEN_MAX_REQUESTS", 3)
        )
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._lock = asyncio.Lock()

        self._consecutive_failures = 0
        self._failure_count = 0
        self._success_count = 0
        self._total_requests = 0
        self._rejected_requests = 0
        self._half_open_test_count = 0
        self._opened_at: Optional[float] = None

        logger.debug(
            "Circuit breaker initialized",
            extra={
                "breaker": name,
                "failure_threshold": self._failure_threshold,
                "recovery_timeout_ms": self._recovery_timeout_ms,
                "half_open_max_requests": self._half_open_max_requests,
            },
        )

    @property
    def state(self) -> CircuitState:
        return self._state

    async def call(
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """
        Run `func` through the breaker.

        Raises
        ------
        CircuitBreakerError
            If the circuit is open (or the half-open probe budget is spent).
        Exception
            Whatever `func` raised, after it has been recorded as a failure.
        """
        await self._before_call()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            await self._record_failure()
            raise
        await self._record_success()
        return result

    def _retry_after(self) -> float:
        if self._opened_at is None:
            return 0.0
        elapsed_ms = (self._clock() - self._opened_at) * 1000
        return max(0.0, (self._recovery_timeout_ms - elapsed_ms) / 1000)

    async def _before_call(self) -> None:
        async with self._lock:
            self._total_requests += 1

            if self._state == CircuitState.OPEN:
                if self._retry_after() > 0:
                    self._rejected_requests += 1
                    raise CircuitBreakerError(
                        self.name, self._consecutive_failures, self._retry_after()
                    )
                self._transition(CircuitState.HALF_OPEN)

            if self._state == CircuitState.HALF_OPEN:
                if self._half_open_test_count >= self._half_open_max_requests:
                    self._rejected_requests += 1
                    raise CircuitBreakerError(
                        self.name, self._consecutive_failures, 0.0
                    )
                self._half_open_test_count += 1

    async def _record_success(self) -> None:
        async with self._lock:
            self._success_count += 1
            self._consecutive_failures = 0
            if self._state == CircuitState.HALF_OPEN:
                self._transition(CircuitState.CLOSED)

    async def _record_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1
            self._consecutive_failures += 1

            logger.warning(
                "Circuit breaker recorded failure",
                extra={
                    "breaker": self.name,
                    "state": self._state.value,
                    "consecutive_failures": self._consecutive_failures,
                    "failure_threshold": self._failure_threshold,
                },
            )

            if self._state == CircuitState.HALF_OPEN or (
                self._state == CircuitState.CLOSED
                and self._consecutive_failures >= self._failure_threshold
            ):
                self._transition(CircuitState.OPEN)

    def _transition(self, new_state: CircuitState) -> None:
        old_state = self._state
        self._state = new_state

        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
            logger.error(
                "Circuit breaker opened (fail-fast mode)",
                extra={
                    "breaker": self.name,
                    "old_state": old_state.value,
                    "consecutive_failures": self._consecutive_failures,
                    "recovery_timeout_ms": self._recovery_timeout_ms,
                },
            )
        elif new_state == CircuitState.HALF_OPEN:
            self._half_open_test_count = 0
            logger.info(
                "Circuit breaker entering recovery mode (HALF_OPEN)",
                extra={"breaker": self.name, "old_state": old_state.value},
            )
        else:
            self._opened_at = None
            self._half_open_test_count = 0
            logger.info(
                "Circuit breaker closed (normal operation resumed)",
                extra={"breaker": self.name, "old_state": old_state.value},
            )

    def get_metrics(self) -> CircuitBreakerMetrics:
        return CircuitBreakerMetrics(
            name=self.name,
            state=self._state,
            failure_count=self._failure_count,
            success_count=self._success_count,
            consecutive_failures=self._consecutive_failures,
            total_requests=self._total_requests,
            rejected_requests=self._rejected_requests,
        )
