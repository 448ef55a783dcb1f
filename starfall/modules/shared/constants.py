"""
Starfall Record Keys and Handler Names

Purpose
-------
Name every key the engine reads from or writes to the record service, and
every handler name it exposes. Keys are enums so a typo is an
AttributeError at import time rather than a silently empty read.

Tunable values (starting HP, starting pack, currency code) live in
ConfigManager, not here.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class StatisticKey(str, Enum):
    KILLS = "kills"
    EXPERIENCE = "experience"
    LEVEL = "level"


class DataKey(str, Enum):
    CURRENT_HP = "currenthp"
    MAX_HP = "maxhp"
    EQUIPMENT = "equipment"  # JSON object encoded as a string


class TitleDataKey(str, Enum):
    PLANETS = "Planets"
    ENEMIES = "Enemies"
    LEVELS = "Levels"


class DataPermission(str, Enum):
    PRIVATE = "Private"
    PUBLIC = "Public"


class HandlerName(str, Enum):
    KILLED_ENEMY_GROUP = "killedEnemyGroup"
    PLAYER_LOGIN = "playerLogin"
    RETURN_TO_HOME_BASE = "returnToHomeBase"
    EQUIP_ITEM = "equipItem"


PROGRESSION_STATISTICS: Final[tuple] = (
    StatisticKey.KILLS,
    StatisticKey.EXPERIENCE,
    StatisticKey.LEVEL,
)
VITALS_KEYS: Final[tuple] = (DataKey.CURRENT_HP, DataKey.MAX_HP)
