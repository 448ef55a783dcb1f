"""
Player session service.

Handles the two session lifecycle handlers:

- `on_login`: first-login detection and starting pack, vitals bootstrap,
  and a snapshot of the player's progression for the client
- `on_return_to_base`: restore current HP to max HP

First Login
-----------
A player is new when their inventory holds no items and their balance of
the configured currency (``CR``) is zero. An absent currency counts as
zero. New players receive the starting pack, unpacked like any other grant,
and the inventory is read again so the response reflects the grant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starfall.domain.models.player import PlayerVitals
from starfall.modules.player.contracts import LoginResponse, ReturnToBaseResponse
from starfall.modules.shared.base_repository import PlayerRecordRepository
from starfall.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from logging import Logger

    from starfall.adapters.base import PlayerRecordStore
    from starfall.core.config.manager import ConfigManager
    from starfall.domain.models.player import Inventory
    from starfall.modules.inventory.service import InventoryService


class PlayerSessionService(BaseService):

    def __init__(
        self,
        config_manager: ConfigManager,
        record_store: PlayerRecordStore,
        inventory_service: InventoryService,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, record_store, logger)
        self.records = PlayerRecordRepository(
            record_store,
            logger,
            starting_level=int(self.get_config("progression.starting_level", 1)),
            starting_experience=self.get_config("progression.starting_experience", 0),
            starting_hp=self.get_config("progression.starting_hp", 100),
        )
        self.inventory = inventory_service

    def _is_first_login(self, inventory: Inventory) -> bool:
        currency_code = self.get_config("progression.currency_code", "CR")
        return inventory.is_empty and inventory.currency_balance(currency_code) == 0

    async def on_login(self, player_id: str) -> LoginResponse:
        inventory = await self.records.get_inventory(player_id)

        did_grant = False
        if self._is_first_login(inventory):
            starting_pack = self.get_config(
                "progression.starting_pack_item", "StartingPack", required=True
            )
            await self.inventory.grant_items(player_id, [starting_pack])
            inventory = await self.records.get_inventory(player_id)
            did_grant = True

        snapshot = await self.records.load_data(player_id)
        if snapshot.current_hp is None:
            vitals = PlayerVitals(
                current_hp=self.records.starting_hp, max_hp=self.records.starting_hp
            )
            await self.records.save_vitals(player_id, vitals)
        else:
            vitals = self.records.vitals_from(snapshot)

        stats = await self.records.get_statistics(player_id)

        self.log_operation(
            "on_login",
            did_grant_starting_pack=did_grant,
            level=stats.level,
            item_count=len(inventory.items),
        )

        return LoginResponse(
            did_grant_starting_pack=did_grant,
            player_hp=vitals.current_hp,
            equipment=snapshot.equipment or {},
            experience=stats.experience,
            level=stats.level,
            inventory=inventory,
        )

    async def on_return_to_base(self, player_id: str) -> ReturnToBaseResponse:
        """Heal to max HP. A player already at full health causes no write."""
        vitals = await self.records.get_vitals(player_id)

        if not vitals.is_full:
            await self.records.save_current_hp(player_id, vitals.max_hp)
            self.log_operation(
                "on_return_to_base",
                healed_from=vitals.current_hp,
                max_hp=vitals.max_hp,
            )

        await self.emit_telemetry(
            player_id,
            self.get_config("telemetry.travel_event", "returned_to_home_base"),
            {"maxHP": vitals.max_hp},
        )

        return ReturnToBaseResponse(max_hp=vitals.max_hp)
