"""
Progression: combat validation, leveling and combat resolution.

- **validator**: checks a combat submission against reference data
- **leveling**: pure level-up resolution
- **contracts**: `killedEnemyGroup` request/response
- **service**: `CombatService`, the handler orchestration
"""

from starfall.modules.progression.contracts import CombatRequest, CombatResponse
from starfall.modules.progression.leveling import (
    LevelUpEvent,
    LevelUpSummary,
    resolve_level_ups,
    summarize_level_ups,
)
from starfall.modules.progression.service import CombatService
from starfall.modules.progression.validator import validate_combat_request

__all__ = [
    "CombatRequest",
    "CombatResponse",
    "CombatService",
    "LevelUpEvent",
    "LevelUpSummary",
    "resolve_level_ups",
    "summarize_level_ups",
    "validate_combat_request",
]
