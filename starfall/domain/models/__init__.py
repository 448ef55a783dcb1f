"""
Domain models for Starfall.

- **reference**: static game content (planets, enemies, levels)
- **player**: player record snapshots (statistics, vitals, inventory)
"""

from starfall.domain.models.base import DomainValidationError
from starfall.domain.models.player import (
    Equipment,
    Inventory,
    ItemInstance,
    PlayerStatistics,
    PlayerVitals,
    apply_equipment,
)
from starfall.domain.models.reference import (
    Area,
    Enemy,
    EnemyGroupDef,
    LevelDef,
    Planet,
    ReferenceData,
)

__all__ = [
    "DomainValidationError",
    "Area",
    "Enemy",
    "EnemyGroupDef",
    "LevelDef",
    "Planet",
    "ReferenceData",
    "Equipment",
    "Inventory",
    "ItemInstance",
    "PlayerStatistics",
    "PlayerVitals",
    "apply_equipment",
]
