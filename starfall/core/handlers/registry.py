"""
Handler Registry
================

Purpose
-------
Map client-facing handler names (``killedEnemyGroup``, ``playerLogin``,
``returnToHomeBase``, ``equipItem``) to service calls, and run each call
inside a `LogContext` bound to the player and handler.

Error Translation
-----------------
- `StarfallDomainException` (malformed payload, unknown handler) becomes
  ``{"isError": true, "errorMessage": ...}`` and is logged at INFO.
- Infrastructure exceptions propagate unchanged.

Registration is explicit: `build_handler_registry` wires the four handlers
to the services it is given. Nothing registers itself at import time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Mapping, Optional

from starfall.core.logging.logger import LogContext, get_logger
from starfall.modules.equipment.contracts import EquipItemRequest
from starfall.modules.progression.contracts import CombatRequest
from starfall.modules.shared.constants import HandlerName
from starfall.modules.shared.exceptions import NotFoundError, StarfallDomainException

if TYPE_CHECKING:
    from starfall.modules.equipment.service import EquipmentService
    from starfall.modules.player.service import PlayerSessionService
    from starfall.modules.progression.service import CombatService

logger = get_logger(__name__)

Handler = Callable[[str, Mapping[str, Any]], Awaitable[Dict[str, Any]]]


class HandlerRegistry:

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def register(self, name: str, handler: Handler) -> None:
        if name in self._handlers:
            raise ValueError(f"Handler already registered: {name}")
        self._handlers[name] = handler

    @property
    def names(self) -> List[str]:
        return sorted(self._handlers)

    async def dispatch(
        self,
        name: str,
        player_id: str,
        payload: Optional[Mapping[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run handler `name` for `player_id` and return its wire response.

        Raises:
            StarfallInfrastructureException: On store, cache, or config failure.
        """
        async with LogContext(
            player_id=player_id,
            handler=name,
            component="handlers",
            correlation_id=correlation_id,
        ):
            try:
                handler = self._handlers.get(name)
                if handler is None:
                    raise NotFoundError("Handler", name)
                if payload is not None and not isinstance(payload, Mapping):
                    raise StarfallDomainException(
                        "Request payload must be a JSON object",
                        error_code="INVALID_PAYLOAD",
                    )
                return await handler(player_id, payload or {})
            except StarfallDomainException as exc:
                logger.info(
                    "Handler rejected request",
                    extra={"error_code": exc.error_code, "error_message": exc.message},
                )
                return {"isError": True, "errorMessage": exc.message}


def build_handler_registry(
    combat_service: CombatService,
    session_service: PlayerSessionService,
    equipment_service: EquipmentService,
) -> HandlerRegistry:
    registry = HandlerRegistry()

    async def killed_enemy_group(player_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        request = CombatRequest.from_payload(payload)
        return (await combat_service.resolve_combat(player_id, request)).to_dict()

    async def player_login(player_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return (await session_service.on_login(player_id)).to_dict()

    async def return_to_home_base(player_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return (await session_service.on_return_to_base(player_id)).to_dict()

    async def equip_item(player_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        request = EquipItemRequest.from_payload(payload)
        return (await equipment_service.on_equip_item(player_id, request)).to_dict()

    registry.register(HandlerName.KILLED_ENEMY_GROUP.value, killed_enemy_group)
    registry.register(HandlerName.PLAYER_LOGIN.value, player_login)
    registry.register(HandlerName.RETURN_TO_HOME_BASE.value, return_to_home_base)
    registry.register(HandlerName.EQUIP_ITEM.value, equip_item)
    return registry
