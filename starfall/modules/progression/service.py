"""
Combat resolution service.

Resolves a client's report that it defeated an enemy group: validates the
report against reference data, awards kills and experience, applies level
ups, persists vitals, rolls loot, and grants items.

Trust Boundary
--------------
The client chooses which group it fought and reports its own remaining HP.
The group is checked against reference data; rewards are always computed
from the group definition, never from client numbers. Client HP is trusted
only when no level-up happens, and is clamped into [0, max HP]. A level-up
heals the player to the new maximum and ignores the reported HP.

Write Ordering
--------------
Remote calls run strictly in sequence:

1. title data read
2. statistics and vitals read (skipped when validation fails)
3. statistics write (kills, experience, level if changed)
4. vitals write
5. loot table evaluation, then one grant call with unpacking
6. telemetry (failure is logged, never raised)

There is no cross-call transaction. A failure after step 3 leaves earlier
writes committed; nothing is retried.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, List, Optional

from starfall.core.exceptions import StarfallInfrastructureException
from starfall.domain.models.player import PlayerVitals
from starfall.modules.progression.contracts import CombatRequest, CombatResponse
from starfall.modules.progression.leveling import resolve_level_ups, summarize_level_ups
from starfall.modules.progression.validator import (
    resolve_group_enemies,
    validate_combat_request,
)
from starfall.modules.shared.base_repository import (
    PlayerRecordRepository,
    ReferenceDataRepository,
)
from starfall.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from logging import Logger

    from starfall.adapters.base import PlayerRecordStore, ReferenceDataStore
    from starfall.core.config.manager import ConfigManager
    from starfall.domain.models.reference import EnemyGroupDef
    from starfall.modules.inventory.service import InventoryService


class CombatService(BaseService):
    """
    Orchestrates the `killedEnemyGroup` handler.

    Args:
        config_manager: Game tuning values
        reference_store: Title data source
        record_store: Player record store
        inventory_service: Grants items and unpacks bundles
        logger: Structured logger
        rng: Random source for drop rolls; injectable for deterministic tests
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        reference_store: ReferenceDataStore,
        record_store: PlayerRecordStore,
        inventory_service: InventoryService,
        logger: Logger,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(config_manager, record_store, logger)
        self.reference = ReferenceDataRepository(reference_store, logger)
        self.records = PlayerRecordRepository(
            record_store,
            logger,
            starting_level=int(self.get_config("progression.starting_level", 1)),
            starting_experience=self.get_config("progression.starting_experience", 0),
            starting_hp=self.get_config("progression.starting_hp", 100),
        )
        self.inventory = inventory_service
        self._rng = rng or random.Random()

    async def resolve_combat(
        self, player_id: str, request: CombatRequest
    ) -> CombatResponse:
        try:
            return await self._resolve_combat(player_id, request)
        except StarfallInfrastructureException as exc:
            self.log_error(
                "resolve_combat",
                exc,
                planet=request.planet,
                area=request.area,
                enemy_group=request.enemy_group,
            )
            raise

    async def _resolve_combat(
        self, player_id: str, request: CombatRequest
    ) -> CombatResponse:
        reference = await self.reference.load()

        error_message = validate_combat_request(request, reference)
        if error_message is not None:
            self.log.info(
                "Rejected combat submission",
                extra={
                    "reason": error_message,
                    "planet": request.planet,
                    "area": request.area,
                    "enemy_group": request.enemy_group,
                },
            )
            return CombatResponse.error(error_message)

        group = reference.find_enemy_group(request.enemy_group)
        enemies = resolve_group_enemies(group, reference)

        stats = await self.records.get_statistics(player_id)
        vitals = await self.records.get_vitals(player_id)

        kills = stats.kills + len(enemies)
        experience = stats.experience + sum(enemy.experience_yield for enemy in enemies)

        summary = summarize_level_ups(
            resolve_level_ups(reference.level_table, stats.level, experience),
            starting_level=stats.level,
        )

        await self.records.save_statistics(
            player_id,
            kills=kills,
            experience=experience,
            level=summary.final_level if summary.leveled_up else None,
        )

        if summary.leveled_up:
            vitals = vitals.with_bonus_max_hp(summary.hit_points_granted)
            await self.records.save_vitals(player_id, vitals)
        else:
            vitals = PlayerVitals.clamped(request.player_hp, vitals.max_hp)
            await self.records.save_current_hp(player_id, vitals.current_hp)

        items: List[str] = list(summary.items_granted)
        loot = await self._roll_loot(group)
        if loot is not None:
            items.append(loot)

        await self.inventory.grant_items(player_id, items)

        self.log_operation(
            "resolve_combat",
            enemy_group=group.name,
            kills=kills,
            experience=experience,
            levels_gained=summary.levels_gained,
            items_granted=items,
        )

        await self.emit_telemetry(
            player_id,
            self.get_config("telemetry.combat_event", "killed_enemy_group"),
            {
                "planet": request.planet,
                "area": request.area,
                "enemyGroup": request.enemy_group,
            },
        )

        return CombatResponse(
            kills=kills,
            experience=experience,
            items_granted=tuple(items),
            level=summary.final_level if summary.leveled_up else None,
            hit_points=vitals.max_hp if summary.leveled_up else None,
        )

    async def _roll_loot(self, group: EnemyGroupDef) -> Optional[str]:
        """
        Roll the group's drop chance and evaluate its drop table once.

        A group with a drop table but no drop chance always drops.
        """
        if not group.drop_table:
            return None
        if group.drop_chance is not None and self._rng.random() > group.drop_chance:
            return None

        return await self.reference.evaluate_drop_table(
            group.drop_table, self.get_config("progression.catalog_version")
        )
