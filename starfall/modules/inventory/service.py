"""
Inventory grants.

Purpose
-------
Grant catalog items to a player and open any bundles among them.

Granted items whose item class contains the configured unpack marker
(`progression.unpack_class_name`, default ``"unpack"``) are bundles such as
a pack of credits. They are consumed right after the grant, with their full
remaining uses, so the record service credits their contents.

Non-Responsibilities
--------------------
- Deciding what to grant (combat and login services do that)
- Catalog semantics; bundle contents are defined by the record service
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

from starfall.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from logging import Logger

    from starfall.adapters.base import PlayerRecordStore
    from starfall.core.config.manager import ConfigManager
    from starfall.domain.models.player import ItemInstance


class InventoryService(BaseService):

    def __init__(
        self,
        config_manager: ConfigManager,
        record_store: PlayerRecordStore,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, record_store, logger)
        self._store = record_store

    async def grant_items(
        self, player_id: str, item_ids: Sequence[str]
    ) -> List[ItemInstance]:
        """
        Grant `item_ids` in a single call and unpack bundles.

        Returns the granted instances in grant order. An empty request makes
        no remote call.
        """
        if not item_ids:
            return []

        catalog_version = self.get_config("progression.catalog_version")
        unpack_marker = self.get_config("progression.unpack_class_name", "unpack")

        granted = await self._store.grant_items(player_id, list(item_ids), catalog_version)
        self.log_operation(
            "grant_items",
            item_ids=list(item_ids),
            granted_count=len(granted),
        )

        for item in granted:
            if item.has_class_containing(unpack_marker):
                uses = item.remaining_uses if item.remaining_uses else 1
                await self._store.consume_item(player_id, item.item_instance_id, uses)
                self.log.info(
                    "Unpacked granted bundle",
                    extra={
                        "item_id": item.item_id,
                        "item_instance_id": item.item_instance_id,
                        "consume_count": uses,
                    },
                )

        return granted
