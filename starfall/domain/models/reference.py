"""
Reference data domain models for Starfall.

Purpose
-------
Immutable, typed view of the static game content stored as title data:
planets and their areas, enemy definitions, enemy groups (with optional
loot tables), and the level table.

Responsibilities
----------------
- Parse the decoded `Planets`, `Enemies` and `Levels` documents
- Reject structurally malformed content with `DomainValidationError`
- Provide lookups used by the combat validator and the leveling resolver

Non-Responsibilities
--------------------
- Fetching title data (handled by `ReferenceDataRepository`)
- Deciding whether a combat submission is valid (handled by
  `starfall.modules.progression.validator`)

Wire Shapes
-----------
Planets: {"planets": [{"name", "areas": [{"name", "enemyGroups": [str]}]}]}
Enemies: {"enemies": [{"name", "experience"}],
          "enemyGroups": [{"name", "enemies": [str], "droptable"?, "dropchance"?}]}
Levels:  {"levels": [{"level", "experience", "hitPoints", "itemGranted"?}]}

Name lookups return the first matching entry when content lists a name twice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from starfall.domain.models.base import (
    DomainValidationError,
    require_integer,
    require_number,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
    validate_probability,
)


# ============================================================================
# WORLD
# ============================================================================


@dataclass(frozen=True)
class Area:
    name: str
    enemy_groups: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        validate_not_empty(self.name, "area.name")

    def has_enemy_group(self, group_name: str) -> bool:
        return group_name in self.enemy_groups


@dataclass(frozen=True)
class Planet:
    name: str
    areas: Tuple[Area, ...] = ()

    def __post_init__(self) -> None:
        validate_not_empty(self.name, "planet.name")

    def find_area(self, area_name: str) -> Optional[Area]:
        for area in self.areas:
            if area.name == area_name:
                return area
        return None


# ============================================================================
# ENEMIES
# ============================================================================


@dataclass(frozen=True)
class Enemy:
    name: str
    experience_yield: int

    def __post_init__(self) -> None:
        validate_not_empty(self.name, "enemy.name")
        validate_non_negative(self.experience_yield, "enemy.experience")


@dataclass(frozen=True)
class EnemyGroupDef:
    """
    A fightable group of enemies.

    `enemies` may list the same enemy more than once; each occurrence counts
    as one kill and yields experience separately.
    """

    name: str
    enemies: Tuple[str, ...] = ()
    drop_table: Optional[str] = None
    drop_chance: Optional[float] = None

    def __post_init__(self) -> None:
        validate_not_empty(self.name, "enemyGroup.name")
        if self.drop_chance is not None:
            validate_probability(self.drop_chance, "enemyGroup.dropchance")


# ============================================================================
# LEVELS
# ============================================================================


@dataclass(frozen=True)
class LevelDef:
    level: int
    experience_required: int
    hit_points_granted: int
    item_granted: Optional[str] = None

    def __post_init__(self) -> None:
        validate_positive(self.level, "level.level")
        validate_non_negative(self.experience_required, "level.experience")
        validate_non_negative(self.hit_points_granted, "level.hitPoints")


# ============================================================================
# AGGREGATE
# ============================================================================


@dataclass(frozen=True)
class ReferenceData:
    """
    All reference content needed to resolve one combat request.

    Usage Example
    -------------
    >>> reference = ReferenceData.from_title_data(planets_doc, enemies_doc, levels_doc)
    >>> planet = reference.find_planet("Kepler")
    >>> reference.level_table[2].experience_required
    100
    """

    planets: Tuple[Planet, ...] = ()
    enemies: Tuple[Enemy, ...] = ()
    enemy_groups: Tuple[EnemyGroupDef, ...] = ()
    levels: Tuple[LevelDef, ...] = ()
    _level_table: Dict[int, LevelDef] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        table: Dict[int, LevelDef] = {}
        for level_def in self.levels:
            table.setdefault(level_def.level, level_def)
        object.__setattr__(self, "_level_table", table)

    @property
    def level_table(self) -> Mapping[int, LevelDef]:
        return self._level_table

    def find_planet(self, name: str) -> Optional[Planet]:
        return next((p for p in self.planets if p.name == name), None)

    def find_enemy_group(self, name: str) -> Optional[EnemyGroupDef]:
        return next((g for g in self.enemy_groups if g.name == name), None)

    def find_enemy(self, name: str) -> Optional[Enemy]:
        return next((e for e in self.enemies if e.name == name), None)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def from_title_data(
        cls,
        planets_doc: Mapping[str, Any],
        enemies_doc: Mapping[str, Any],
        levels_doc: Mapping[str, Any],
    ) -> "ReferenceData":
        """
        Build reference data from decoded title data documents.

        Raises
        ------
        DomainValidationError
            If any document does not have the expected shape.
        """
        planets = tuple(
            Planet(
                name=raw.get("name"),
                areas=tuple(
                    Area(
                        name=area.get("name"),
                        enemy_groups=tuple(_str_list(area, "enemyGroups")),
                    )
                    for area in _dict_list(raw, "areas")
                ),
            )
            for raw in _dict_list(planets_doc, "planets")
        )

        enemies = tuple(
            Enemy(
                name=raw.get("name"),
                experience_yield=require_integer(raw.get("experience"), "enemy.experience"),
            )
            for raw in _dict_list(enemies_doc, "enemies")
        )

        enemy_groups = tuple(
            EnemyGroupDef(
                name=raw.get("name"),
                enemies=tuple(_str_list(raw, "enemies")),
                drop_table=raw.get("droptable") or None,
                drop_chance=(
                    float(require_number(raw["dropchance"], "enemyGroup.dropchance"))
                    if raw.get("dropchance") is not None
                    else None
                ),
            )
            for raw in _dict_list(enemies_doc, "enemyGroups")
        )

        levels = tuple(
            LevelDef(
                level=require_integer(raw.get("level"), "level.level"),
                experience_required=require_integer(raw.get("experience"), "level.experience"),
                hit_points_granted=require_integer(raw.get("hitPoints"), "level.hitPoints"),
                item_granted=raw.get("itemGranted") or None,
            )
            for raw in _dict_list(levels_doc, "levels")
        )

        return cls(
            planets=planets,
            enemies=enemies,
            enemy_groups=enemy_groups,
            levels=levels,
        )


def _dict_list(doc: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    if not isinstance(doc, Mapping):
        raise DomainValidationError(
            f"expected an object holding '{key}', got {type(doc).__name__}", field=key
        )
    items = doc.get(key, [])
    if not isinstance(items, list) or not all(isinstance(i, Mapping) for i in items):
        raise DomainValidationError(f"'{key}' must be a list of objects", field=key)
    return items


def _str_list(doc: Mapping[str, Any], key: str) -> List[str]:
    items = doc.get(key, [])
    if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
        raise DomainValidationError(f"'{key}' must be a list of strings", field=key)
    return items
