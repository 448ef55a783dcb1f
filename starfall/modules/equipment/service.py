"""
Equipment service.

Merges slot assignments into the player's stored equipment map. Slots the
request does not mention keep their item; a slot assigned twice in one
request ends with the later assignment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starfall.domain.models.player import apply_equipment
from starfall.modules.equipment.contracts import EquipItemRequest, EquipItemResponse
from starfall.modules.shared.base_repository import PlayerRecordRepository
from starfall.modules.shared.base_service import BaseService
from starfall.modules.shared.exceptions import ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from starfall.adapters.base import PlayerRecordStore
    from starfall.core.config.manager import ConfigManager


class EquipmentService(BaseService):

    def __init__(
        self,
        config_manager: ConfigManager,
        record_store: PlayerRecordStore,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, record_store, logger)
        self.records = PlayerRecordRepository(record_store, logger)

    async def on_equip_item(
        self, player_id: str, request: EquipItemRequest
    ) -> EquipItemResponse:
        assignments = list(request.assignments())
        if not assignments:
            raise ValidationError("equipment", "at least one slot assignment is required")

        current = await self.records.get_equipment(player_id)
        equipment = apply_equipment(current, assignments)
        data_version = await self.records.save_equipment(player_id, equipment)

        self.log_operation(
            "on_equip_item",
            slots=[slot for slot, _ in assignments],
            data_version=data_version,
        )

        await self.emit_telemetry(
            player_id,
            self.get_config("telemetry.equip_event", "equipped_item"),
            dict(request.raw),
        )

        return EquipItemResponse(data_version=data_version, equipment=equipment)
