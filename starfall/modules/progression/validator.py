"""
Combat submission validation.

Checks a client's claim "I defeated enemy group G in area A on planet P"
against reference data. Checks run in order and stop at the first failure:

1. the planet exists
2. the area exists on that planet
3. the area lists the enemy group
4. the enemy group has a definition in enemy data

Validation reads nothing but the reference data passed in and mutates
nothing; the caller decides what to do with the message.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from starfall.core.exceptions import ReferenceDataError

if TYPE_CHECKING:
    from starfall.domain.models.reference import Enemy, EnemyGroupDef, ReferenceData
    from starfall.modules.progression.contracts import CombatRequest


def validate_combat_request(
    request: CombatRequest, reference: ReferenceData
) -> Optional[str]:
    """Return a message naming the first missing entity, or None if valid."""
    planet = reference.find_planet(request.planet)
    if planet is None:
        return f"Planet {request.planet} not found."

    area = planet.find_area(request.area)
    if area is None:
        return f"Area {request.area} not found on planet {request.planet}."

    if not area.has_enemy_group(request.enemy_group):
        return (
            f"Enemy group {request.enemy_group} not found in area "
            f"{request.area} on planet {request.planet}."
        )

    if reference.find_enemy_group(request.enemy_group) is None:
        return f"Enemy group {request.enemy_group} not found."

    return None


def resolve_group_enemies(group: EnemyGroupDef, reference: ReferenceData) -> List[Enemy]:
    """
    Enemy definitions for every entry of `group`, duplicates preserved.

    Raises:
        ReferenceDataError: If the group lists an enemy with no definition.
    """
    enemies: List[Enemy] = []
    for name in group.enemies:
        enemy = reference.find_enemy(name)
        if enemy is None:
            raise ReferenceDataError(
                group.name, f"enemy group lists undefined enemy '{name}'"
            )
        enemies.append(enemy)
    return enemies
