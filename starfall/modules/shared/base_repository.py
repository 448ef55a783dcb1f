"""
Record Repositories

Purpose
-------
Typed access to the external stores. Repositories convert between the
stores' string/number wire values and the domain models, and apply the
defaults for records that have never been written.

Design Notes
------------
This module provides:
- `ReferenceDataRepository`: loads and parses the title data documents
- `PlayerRecordRepository`: statistics, vitals, equipment and inventory

What these classes do NOT do:
- Contain business rules (services decide what to write)
- Retry failed calls
- Cache (reference data caching wraps the store, not the repository)

Usage
-----
    repo = PlayerRecordRepository(record_store, logger, starting_level=1, starting_hp=100)
    stats = await repo.get_statistics(player_id)
    await repo.save_statistics(player_id, kills=3, experience=30)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Sequence

from starfall.core.exceptions import RecordStoreError, ReferenceDataError
from starfall.domain.models.base import DomainValidationError, Number
from starfall.domain.models.player import (
    Equipment,
    Inventory,
    PlayerStatistics,
    PlayerVitals,
)
from starfall.domain.models.reference import ReferenceData
from starfall.modules.shared.constants import (
    PROGRESSION_STATISTICS,
    DataKey,
    DataPermission,
    StatisticKey,
    TitleDataKey,
)

if TYPE_CHECKING:
    from logging import Logger

    from starfall.adapters.base import PlayerRecordStore, ReferenceDataStore


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_number(raw: str, key: str) -> Number:
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise RecordStoreError(
            "GetUserData", f"stored value for '{key}' is not a number: {raw!r}"
        ) from exc
    return int(value) if value.is_integer() else value


# ============================================================================
# Reference data
# ============================================================================


class ReferenceDataRepository:
    """Loads the Planets / Enemies / Levels documents as `ReferenceData`."""

    def __init__(self, reference_store: ReferenceDataStore, logger: Logger) -> None:
        self._store = reference_store
        self.log = logger

    async def load(self) -> ReferenceData:
        keys = [key.value for key in TitleDataKey]
        documents = await self._store.get_title_data(keys)

        for key in keys:
            if key not in documents:
                raise ReferenceDataError(key, "title data key is missing")

        try:
            return ReferenceData.from_title_data(
                documents[TitleDataKey.PLANETS.value],
                documents[TitleDataKey.ENEMIES.value],
                documents[TitleDataKey.LEVELS.value],
            )
        except DomainValidationError as exc:
            raise ReferenceDataError(exc.field or "title data", str(exc)) from exc

    async def evaluate_drop_table(
        self, table_id: str, catalog_version: Optional[str] = None
    ) -> str:
        return await self._store.evaluate_random_result_table(table_id, catalog_version)


# ============================================================================
# Player records
# ============================================================================


@dataclass(frozen=True)
class PlayerDataSnapshot:
    """Raw keyed data as read; `None` means the key was never written."""

    current_hp: Optional[Number] = None
    max_hp: Optional[Number] = None
    equipment: Optional[Equipment] = None


class PlayerRecordRepository:
    """
    Typed reads and writes over a `PlayerRecordStore`.

    Args:
        record_store: Player record store adapter
        logger: Structured logger
        starting_level: Level assumed when the statistic was never written
        starting_experience: Experience assumed when never written
        starting_hp: Max HP assumed when never written
    """

    def __init__(
        self,
        record_store: PlayerRecordStore,
        logger: Logger,
        starting_level: int = 1,
        starting_experience: Number = 0,
        starting_hp: Number = 100,
    ) -> None:
        self._store = record_store
        self.log = logger
        self.starting_level = starting_level
        self.starting_experience = starting_experience
        self.starting_hp = starting_hp

    # ------------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------------

    async def get_statistics(self, player_id: str) -> PlayerStatistics:
        values = await self._store.get_statistics(
            player_id, [key.value for key in PROGRESSION_STATISTICS]
        )
        try:
            return PlayerStatistics(
                kills=values.get(StatisticKey.KILLS.value, 0),
                experience=values.get(StatisticKey.EXPERIENCE.value, self.starting_experience),
                level=values.get(StatisticKey.LEVEL.value, self.starting_level),
            )
        except DomainValidationError as exc:
            raise RecordStoreError("GetPlayerStatistics", str(exc)) from exc

    async def save_statistics(
        self,
        player_id: str,
        kills: int,
        experience: int,
        level: Optional[int] = None,
    ) -> None:
        """Write statistics in one batched update; `level` only when given."""
        values: Dict[str, int] = {
            StatisticKey.KILLS.value: int(kills),
            StatisticKey.EXPERIENCE.value: int(experience),
        }
        if level is not None:
            values[StatisticKey.LEVEL.value] = int(level)
        await self._store.update_statistics(player_id, values)

    # ------------------------------------------------------------------------
    # Keyed data
    # ------------------------------------------------------------------------

    async def load_data(
        self,
        player_id: str,
        keys: Sequence[DataKey] = (DataKey.CURRENT_HP, DataKey.MAX_HP, DataKey.EQUIPMENT),
    ) -> PlayerDataSnapshot:
        raw = await self._store.get_data(player_id, [key.value for key in keys])

        current = raw.get(DataKey.CURRENT_HP.value)
        maximum = raw.get(DataKey.MAX_HP.value)
        equipment = raw.get(DataKey.EQUIPMENT.value)

        return PlayerDataSnapshot(
            current_hp=_parse_number(current, DataKey.CURRENT_HP.value) if current is not None else None,
            max_hp=_parse_number(maximum, DataKey.MAX_HP.value) if maximum is not None else None,
            equipment=self._parse_equipment(equipment) if equipment is not None else None,
        )

    def vitals_from(self, snapshot: PlayerDataSnapshot) -> PlayerVitals:
        """
        Vitals with defaults applied.

        Absent max HP is the starting HP; absent current HP is full health.
        Stored values outside [0, max] are clamped; a negative stored max
        is a corrupt record.
        """
        max_hp = snapshot.max_hp if snapshot.max_hp is not None else self.starting_hp
        current_hp = snapshot.current_hp if snapshot.current_hp is not None else max_hp
        try:
            return PlayerVitals.clamped(current_hp, max_hp)
        except DomainValidationError as exc:
            raise RecordStoreError("GetUserData", str(exc)) from exc

    async def get_vitals(self, player_id: str) -> PlayerVitals:
        snapshot = await self.load_data(player_id, (DataKey.CURRENT_HP, DataKey.MAX_HP))
        return self.vitals_from(snapshot)

    async def save_vitals(self, player_id: str, vitals: PlayerVitals) -> int:
        return await self._store.update_data(
            player_id,
            {
                DataKey.CURRENT_HP.value: _format_number(vitals.current_hp),
                DataKey.MAX_HP.value: _format_number(vitals.max_hp),
            },
            DataPermission.PRIVATE,
        )

    async def save_current_hp(self, player_id: str, current_hp: Number) -> int:
        return await self._store.update_data(
            player_id,
            {DataKey.CURRENT_HP.value: _format_number(current_hp)},
            DataPermission.PRIVATE,
        )

    @staticmethod
    def _parse_equipment(raw: str) -> Equipment:
        try:
            value = json.loads(raw)
        except ValueError as exc:
            raise RecordStoreError(
                "GetUserData", f"stored equipment is not valid JSON: {exc}"
            ) from exc
        if not isinstance(value, dict):
            raise RecordStoreError("GetUserData", "stored equipment is not an object")
        return {str(slot): str(item) for slot, item in value.items()}

    async def get_equipment(self, player_id: str) -> Optional[Equipment]:
        snapshot = await self.load_data(player_id, (DataKey.EQUIPMENT,))
        return snapshot.equipment

    async def save_equipment(self, player_id: str, equipment: Equipment) -> int:
        return await self._store.update_data(
            player_id,
            {DataKey.EQUIPMENT.value: json.dumps(equipment)},
            DataPermission.PRIVATE,
        )

    # ------------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------------

    async def get_inventory(self, player_id: str) -> Inventory:
        return await self._store.get_inventory(player_id)
