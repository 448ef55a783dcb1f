"""
Pytest Configuration and Fixtures for Starfall Tests
====================================================

Purpose
-------
Centralized fixtures for the Starfall test suite: in-memory recording fakes
for both external stores, canonical reference content, and services wired
against the fakes.

Architecture Notes
------------------
- Unit tests run against the fakes (fast, isolated, no network)
- Integration tests use testcontainers (real Redis)
- Fakes record every call in order so tests can assert "no writes" and
  write ordering directly
"""

from __future__ import annotations

import copy
import itertools
import os
import random
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# Must be set before starfall is imported: logging is configured at import.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("REFERENCE_CACHE_TTL_SECONDS", "0")

import pytest

from starfall.adapters.base import PlayerRecordStore, ReferenceDataStore
from starfall.core.config.manager import ConfigManager
from starfall.core.exceptions import RecordStoreError
from starfall.core.logging.logger import get_logger
from starfall.domain.models.player import Inventory, ItemInstance
from starfall.modules.equipment.service import EquipmentService
from starfall.modules.inventory.service import InventoryService
from starfall.modules.player.service import PlayerSessionService
from starfall.modules.progression.service import CombatService
from starfall.modules.shared.constants import DataPermission

PLAYER_ID = "PLAYER-1"

WRITE_METHODS = {"update_statistics", "update_data", "grant_items", "consume_item"}


# ============================================================================
# REFERENCE CONTENT
# ============================================================================


PLANETS_DOC: Dict[str, Any] = {
    "planets": [
        {
            "name": "Kepler",
            "areas": [
                {"name": "Crater", "enemyGroups": ["Rat Pack", "Lone Wolf", "Broken Pack"]},
                {"name": "Ridge", "enemyGroups": ["Ghosts", "Alpha"]},
            ],
        },
        {"name": "Vega", "areas": []},
    ]
}

ENEMIES_DOC: Dict[str, Any] = {
    "enemies": [
        {"name": "rat", "experience": 10},
        {"name": "wolf", "experience": 10},
        {"name": "alpha", "experience": 400},
    ],
    "enemyGroups": [
        {
            "name": "Rat Pack",
            "enemies": ["rat", "rat", "wolf"],
            "droptable": "RatLoot",
            "dropchance": 0.5,
        },
        {"name": "Lone Wolf", "enemies": ["wolf"]},
        {"name": "Broken Pack", "enemies": ["rat", "gremlin"]},
        {"name": "Alpha", "enemies": ["alpha"], "droptable": "AlphaLoot"},
    ],
}

LEVELS_DOC: Dict[str, Any] = {
    "levels": [
        {"level": 1, "experience": 0, "hitPoints": 0},
        {"level": 2, "experience": 100, "hitPoints": 20, "itemGranted": "BronzeMedal"},
        {"level": 3, "experience": 300, "hitPoints": 30},
    ]
}


def title_documents() -> Dict[str, Any]:
    return {
        "Planets": copy.deepcopy(PLANETS_DOC),
        "Enemies": copy.deepcopy(ENEMIES_DOC),
        "Levels": copy.deepcopy(LEVELS_DOC),
    }


# ============================================================================
# FAKE STORES
# ============================================================================


class FakeReferenceStore(ReferenceDataStore):
    """In-memory title data with scripted loot results."""

    def __init__(
        self,
        documents: Optional[Dict[str, Any]] = None,
        loot: Sequence[str] = ("RatTail",),
    ) -> None:
        self.documents = documents if documents is not None else title_documents()
        self._loot = itertools.cycle(loot)
        self.calls: List[Tuple[str, Any]] = []

    async def get_title_data(self, keys: Sequence[str]) -> Dict[str, Any]:
        self.calls.append(("get_title_data", list(keys)))
        return {k: copy.deepcopy(self.documents[k]) for k in keys if k in self.documents}

    async def evaluate_random_result_table(
        self, table_id: str, catalog_version: Optional[str] = None
    ) -> str:
        self.calls.append(("evaluate_random_result_table", table_id))
        return next(self._loot)


class FakeRecordStore(PlayerRecordStore):
    """
    In-memory player records.

    `catalog` maps item id to (item_class, remaining_uses) for granted
    instances. Methods named in `fail_on` raise RecordStoreError.
    """

    def __init__(self) -> None:
        self.statistics: Dict[str, Dict[str, int]] = {}
        self.data: Dict[str, Dict[str, str]] = {}
        self.items: Dict[str, List[ItemInstance]] = {}
        self.currency: Dict[str, Dict[str, int]] = {}
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []
        self.catalog: Dict[str, Tuple[Optional[str], Optional[int]]] = {}
        self.calls: List[Tuple[str, Any]] = []
        self.fail_on: set = set()
        self.data_version = 0
        self._instance_ids = itertools.count(1)

    def _record(self, method: str, args: Any) -> None:
        self.calls.append((method, args))
        if method in self.fail_on:
            raise RecordStoreError(method, "injected failure")

    @property
    def writes(self) -> List[Tuple[str, Any]]:
        return [call for call in self.calls if call[0] in WRITE_METHODS]

    def calls_to(self, method: str) -> List[Any]:
        return [args for name, args in self.calls if name == method]

    async def get_statistics(self, player_id: str, names: Sequence[str]) -> Dict[str, int]:
        self._record("get_statistics", list(names))
        stats = self.statistics.get(player_id, {})
        return {name: stats[name] for name in names if name in stats}

    async def update_statistics(self, player_id: str, values: Mapping[str, int]) -> None:
        self._record("update_statistics", dict(values))
        self.statistics.setdefault(player_id, {}).update(values)

    async def get_data(self, player_id: str, keys: Sequence[str]) -> Dict[str, str]:
        self._record("get_data", list(keys))
        data = self.data.get(player_id, {})
        return {key: data[key] for key in keys if key in data}

    async def update_data(
        self,
        player_id: str,
        data: Mapping[str, str],
        permission: DataPermission = DataPermission.PRIVATE,
    ) -> int:
        self._record("update_data", (dict(data), permission))
        self.data.setdefault(player_id, {}).update(data)
        self.data_version += 1
        return self.data_version

    async def get_inventory(self, player_id: str) -> Inventory:
        self._record("get_inventory", player_id)
        return Inventory(
            items=tuple(self.items.get(player_id, [])),
            currency=dict(self.currency.get(player_id, {})),
        )

    async def grant_items(
        self,
        player_id: str,
        item_ids: Sequence[str],
        catalog_version: Optional[str] = None,
    ) -> List[ItemInstance]:
        self._record("grant_items", list(item_ids))
        granted = []
        for item_id in item_ids:
            item_class, uses = self.catalog.get(item_id, (None, None))
            granted.append(
                ItemInstance(
                    item_id=item_id,
                    item_instance_id=f"inst-{next(self._instance_ids)}",
                    item_class=item_class,
                    remaining_uses=uses,
                )
            )
        self.items.setdefault(player_id, []).extend(granted)
        return granted

    async def consume_item(self, player_id: str, item_instance_id: str, count: int) -> None:
        self._record("consume_item", (item_instance_id, count))
        self.items[player_id] = [
            item
            for item in self.items.get(player_id, [])
            if item.item_instance_id != item_instance_id
        ]

    async def write_event(
        self, player_id: str, event_name: str, body: Mapping[str, Any]
    ) -> None:
        self._record("write_event", event_name)
        self.events.append((player_id, event_name, dict(body)))


class FixedRoll(random.Random):
    """Random source whose `random()` always returns `value`."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def player_id() -> str:
    return PLAYER_ID


@pytest.fixture
def reference_store() -> FakeReferenceStore:
    return FakeReferenceStore()


@pytest.fixture
def record_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def config_manager() -> ConfigManager:
    return ConfigManager.from_dict({})


@pytest.fixture
def test_logger():
    return get_logger("tests")


@pytest.fixture
def inventory_service(config_manager, record_store, test_logger) -> InventoryService:
    return InventoryService(config_manager, record_store, test_logger)


@pytest.fixture
def combat_service(
    config_manager, reference_store, record_store, inventory_service, test_logger
) -> CombatService:
    """Combat service whose drop rolls always succeed."""
    return CombatService(
        config_manager,
        reference_store,
        record_store,
        inventory_service,
        test_logger,
        rng=FixedRoll(0.0),
    )


@pytest.fixture
def session_service(
    config_manager, record_store, inventory_service, test_logger
) -> PlayerSessionService:
    return PlayerSessionService(config_manager, record_store, inventory_service, test_logger)


@pytest.fixture
def equipment_service(config_manager, record_store, test_logger) -> EquipmentService:
    return EquipmentService(config_manager, record_store, test_logger)


@pytest.fixture
def reference_data():
    from starfall.domain.models.reference import ReferenceData

    return ReferenceData.from_title_data(PLANETS_DOC, ENEMIES_DOC, LEVELS_DOC)
