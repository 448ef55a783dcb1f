from starfall.core.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerMetrics,
    CircuitState,
)

__all__ = ["CircuitBreaker", "CircuitBreakerMetrics", "CircuitState"]
