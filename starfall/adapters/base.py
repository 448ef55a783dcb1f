"""
External Store Interfaces
=========================

Purpose
-------
Abstract interfaces for the two external collaborators the engine depends
on. Services receive concrete implementations by injection; tests supply
in-memory fakes.

- `ReferenceDataStore`: read-only static game content (title data) plus
  opaque random-result-table evaluation.
- `PlayerRecordStore`: per-player statistics, keyed data, inventory,
  item grants/consumption and telemetry events.

Contract
--------
- Every method is a coroutine and performs exactly one remote call.
- Failures raise `StarfallInfrastructureException` subclasses
  (`RecordStoreError`, `ReferenceDataError`, `CircuitBreakerError`).
- Implementations never retry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence

from starfall.domain.models.player import Inventory, ItemInstance
from starfall.modules.shared.constants import DataPermission


# ============================================================================
# Reference Data
# ============================================================================


class ReferenceDataStore(ABC):

    @abstractmethod
    async def get_title_data(self, keys: Sequence[str]) -> Dict[str, Any]:
        """
        Fetch title data values, JSON-decoded.

        Keys with no stored value are absent from the result.
        """
        ...

    @abstractmethod
    async def evaluate_random_result_table(
        self, table_id: str, catalog_version: Optional[str] = None
    ) -> str:
        """Roll a random result table once and return the resulting item id."""
        ...

    async def close(self) -> None:
        return None


# ============================================================================
# Player Records
# ============================================================================


class PlayerRecordStore(ABC):

    # ------------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------------

    @abstractmethod
    async def get_statistics(
        self, player_id: str, names: Sequence[str]
    ) -> Dict[str, int]:
        """Statistics by name; statistics never written are absent."""
        ...

    @abstractmethod
    async def update_statistics(
        self, player_id: str, values: Mapping[str, int]
    ) -> None:
        ...

    # ------------------------------------------------------------------------
    # Keyed data
    # ------------------------------------------------------------------------

    @abstractmethod
    async def get_data(self, player_id: str, keys: Sequence[str]) -> Dict[str, str]:
        """String values by key; keys never written are absent."""
        ...

    @abstractmethod
    async def update_data(
        self,
        player_id: str,
        data: Mapping[str, str],
        permission: DataPermission = DataPermission.PRIVATE,
    ) -> int:
        """
        Merge `data` into the player's keyed data.

        Keys not mentioned are untouched. Returns the new data version.
        """
        ...

    # ------------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------------

    @abstractmethod
    async def get_inventory(self, player_id: str) -> Inventory:
        ...

    @abstractmethod
    async def grant_items(
        self,
        player_id: str,
        item_ids: Sequence[str],
        catalog_version: Optional[str] = None,
    ) -> List[ItemInstance]:
        """Grant catalog items; returns the created instances in grant order."""
        ...

    @abstractmethod
    async def consume_item(
        self, player_id: str, item_instance_id: str, count: int
    ) -> None:
        ...

    # ------------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------------

    @abstractmethod
    async def write_event(
        self, player_id: str, event_name: str, body: Mapping[str, Any]
    ) -> None:
        ...

    async def close(self) -> None:
        return None
