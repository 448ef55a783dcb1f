"""
Base Service Foundation

Purpose
-------
Provides the foundational class for the Starfall progression services.
Services orchestrate reads and writes against the player record store,
call into pure domain logic, and emit telemetry events.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access patterns
- Fire-and-forget telemetry emission

What this class does NOT do:
- Talk HTTP (that's the adapter's job)
- Retry failed remote calls
- Contain game-specific logic

Usage
-----
    class CombatService(BaseService):
        def __init__(self, config_manager, record_store, logger, ...):
            super().__init__(config_manager, record_store, logger)

        async def resolve_combat(self, player_id, request):
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from logging import Logger

    from starfall.adapters.base import PlayerRecordStore
    from starfall.core.config.manager import ConfigManager


class BaseService:
    """
    Base class for all progression services.

    Args:
        config_manager: Game tuning values
        record_store: Player record store adapter (also receives telemetry)
        logger: Structured logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        record_store: PlayerRecordStore,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._telemetry_sink = record_store
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Safely retrieve configuration value.

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        from starfall.core.exceptions import ConfigurationError

        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(
                key, f"Required configuration key '{key}' is missing"
            )
        return value

    async def emit_telemetry(
        self, player_id: str, event_name: str, body: Dict[str, Any]
    ) -> None:
        """
        Write a player telemetry event without letting it fail the request.

        The handler's real work is already committed by the time telemetry
        is written, so a failure here is logged and swallowed.
        """
        try:
            await self._telemetry_sink.write_event(player_id, event_name, body)
        except Exception as exc:
            self.log.warning(
                f"Telemetry event dropped: {event_name}",
                extra={
                    "event_name": event_name,
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                },
            )

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(
        self,
        operation: str,
        error: Exception,
        **context: Any,
    ) -> None:
        """
        Log a service error with full context.

        Args:
            operation: Name of the operation that failed
            error: The exception that occurred
            **context: Additional context data
        """
        self.log.error(
            f"Service error during {operation}: {str(error)}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_message": str(error),
                **context,
            },
        )
