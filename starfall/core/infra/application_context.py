"""
Application Context (Kernel) - Starfall Wiring
===============================================

Purpose
-------
Central dependency injection kernel: builds the configuration, the store
adapters, the services and the handler registry in dependency order, and
tears them down in reverse.

Responsibilities
----------------
- Load ConfigManager (YAML game tuning)
- Validate Config and build the PlayFab client, guarded by a circuit breaker
- Wrap reference data in the Redis cache when a TTL is configured
- Construct services with constructor injection
- Build the handler registry explicitly
- Close adapters on shutdown

Non-Responsibilities
--------------------
- Business logic (delegated to services)
- Transport to clients (the caller owns how requests arrive)

Initialization Order:
    1. ConfigManager
    2. Store adapters (PlayFab client, optional reference cache)
    3. Services (inventory → combat, session, equipment)
    4. HandlerRegistry

Shutdown Order (Reverse):
    1. Reference cache
    2. PlayFab client

Stores may be injected instead of built, which is how tests run the whole
kernel against in-memory fakes.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Mapping, Optional

from starfall.adapters.base import PlayerRecordStore, ReferenceDataStore
from starfall.adapters.playfab import PlayFabClient
from starfall.core.cache.reference_cache import CachedReferenceDataStore
from starfall.core.config.config import Config
from starfall.core.config.manager import ConfigManager
from starfall.core.exceptions import ConfigurationError
from starfall.core.handlers.registry import HandlerRegistry, build_handler_registry
from starfall.core.logging.logger import get_logger
from starfall.core.resilience.circuit_breaker import CircuitBreaker
from starfall.modules.equipment.service import EquipmentService
from starfall.modules.inventory.service import InventoryService
from starfall.modules.player.service import PlayerSessionService
from starfall.modules.progression.service import CombatService

logger = get_logger(__name__)


class ApplicationContext:
    """
    Kernel for infrastructure orchestration and dependency injection.

    Usage:
        context = ApplicationContext()
        await context.initialize()
        response = await context.dispatch("playerLogin", player_id)
        await context.shutdown()
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        reference_store: Optional[ReferenceDataStore] = None,
        record_store: Optional[PlayerRecordStore] = None,
    ) -> None:
        self._config_manager = config_manager
        self._reference_store = reference_store
        self._record_store = record_store
        self._owned: List[Any] = []
        self._registry: Optional[HandlerRegistry] = None
        self._initialized = False

    # ========================================================================
    # INITIALIZATION
    # ========================================================================

    async def initialize(self) -> None:
        """
        Build every component in dependency order.

        Raises:
            RuntimeError: If already initialized or initialization fails
        """
        if self._initialized:
            raise RuntimeError("ApplicationContext already initialized")

        logger.info("========== STARFALL INITIALIZATION START ==========")
        start_time = time.perf_counter()

        try:
            if self._config_manager is None:
                self._config_manager = ConfigManager()
                self._config_manager.load()
            logger.info("✓ ConfigManager ready")

            self._build_stores()
            logger.info(
                "✓ Stores ready",
                extra={
                    "reference_store": type(self._reference_store).__name__,
                    "record_store": type(self._record_store).__name__,
                },
            )

            service_logger = get_logger("starfall.modules")
            inventory = InventoryService(self._config_manager, self._record_store, service_logger)
            combat = CombatService(
                self._config_manager,
                self._reference_store,
                self._record_store,
                inventory,
                get_logger("starfall.modules.progression"),
            )
            session = PlayerSessionService(
                self._config_manager,
                self._record_store,
                inventory,
                get_logger("starfall.modules.player"),
            )
            equipment = EquipmentService(
                self._config_manager,
                self._record_store,
                get_logger("starfall.modules.equipment"),
            )
            logger.info("✓ Services constructed")

            self._registry = build_handler_registry(combat, session, equipment)
            logger.info("✓ Handlers registered", extra={"handlers": self._registry.names})

        except Exception as exc:
            logger.critical(
                "Application context initialization failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            await self._close_owned()
            raise

        self._initialized = True
        logger.info(
            "========== STARFALL INITIALIZED (%.2fms) ==========",
            (time.perf_counter() - start_time) * 1000,
        )

    def _build_stores(self) -> None:
        if self._record_store is None or self._reference_store is None:
            try:
                Config.validate()
            except ValueError as exc:
                raise ConfigurationError("PLAYFAB_SECRET_KEY", str(exc)) from exc

            client = PlayFabClient(
                base_url=Config.playfab_base_url(),
                secret_key=Config.PLAYFAB_SECRET_KEY,
                timeout_seconds=Config.PLAYFAB_TIMEOUT_SECONDS,
                circuit_breaker=CircuitBreaker("playfab"),
            )
            self._owned.append(client)
            if self._record_store is None:
                self._record_store = client
            if self._reference_store is None:
                self._reference_store = client

        if Config.REFERENCE_CACHE_TTL_SECONDS > 0:
            cache = CachedReferenceDataStore.from_url(
                self._reference_store,
                Config.REDIS_URL,
                ttl_seconds=Config.REFERENCE_CACHE_TTL_SECONDS,
                socket_timeout=Config.REDIS_SOCKET_TIMEOUT,
            )
            self._owned.append(cache)
            self._reference_store = cache

    # ========================================================================
    # DISPATCH
    # ========================================================================

    async def dispatch(
        self,
        handler: str,
        player_id: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        return await self.registry.dispatch(handler, player_id, payload)

    # ========================================================================
    # SHUTDOWN
    # ========================================================================

    async def shutdown(self) -> None:
        if not self._initialized:
            logger.warning("ApplicationContext not initialized, nothing to shut down")
            return

        logger.info("========== STARFALL SHUTDOWN START ==========")
        await self._close_owned()
        self._initialized = False
        logger.info("========== SHUTDOWN COMPLETE ==========")

    async def _close_owned(self) -> None:
        while self._owned:
            component = self._owned.pop()
            try:
                await component.close()
                logger.info("✓ %s closed", type(component).__name__)
            except Exception as exc:
                logger.error(
                    "Error closing component",
                    extra={
                        "component_type": type(component).__name__,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def registry(self) -> HandlerRegistry:
        if not self._initialized or self._registry is None:
            raise RuntimeError("Handlers not available: ApplicationContext not initialized")
        return self._registry

    @property
    def config_manager(self) -> ConfigManager:
        if self._config_manager is None:
            raise RuntimeError("ConfigManager not available: ApplicationContext not initialized")
        return self._config_manager

    @property
    def is_initialized(self) -> bool:
        return self._initialized
