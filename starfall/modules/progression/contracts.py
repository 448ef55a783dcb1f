"""
Request/response contracts for the `killedEnemyGroup` handler.

`from_payload` turns an untrusted client payload into a typed request,
raising `ValidationError` for malformed input. `to_dict` renders the
response in the client's camelCase wire format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from starfall.domain.models.base import Number
from starfall.modules.shared.exceptions import ValidationError


def require_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ValidationError(key, "must be a non-empty string")
    return value


def require_number(payload: Mapping[str, Any], key: str) -> Number:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(key, "must be a number")
    return value


@dataclass(frozen=True)
class CombatRequest:
    planet: str
    area: str
    enemy_group: str
    player_hp: Number

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CombatRequest":
        return cls(
            planet=require_str(payload, "planet"),
            area=require_str(payload, "area"),
            enemy_group=require_str(payload, "enemyGroup"),
            player_hp=require_number(payload, "playerHP"),
        )


@dataclass(frozen=True)
class CombatResponse:
    """
    Outcome of a combat submission.

    `level` and `hit_points` are set only when the player leveled up.
    """

    is_error: bool = False
    error_message: Optional[str] = None
    kills: int = 0
    experience: Number = 0
    items_granted: Tuple[str, ...] = field(default_factory=tuple)
    level: Optional[int] = None
    hit_points: Optional[Number] = None

    @classmethod
    def error(cls, message: str) -> "CombatResponse":
        return cls(is_error=True, error_message=message)

    def to_dict(self) -> Dict[str, Any]:
        if self.is_error:
            return {"isError": True, "errorMessage": self.error_message}

        result: Dict[str, Any] = {
            "isError": False,
            "kills": self.kills,
            "experience": self.experience,
            "itemsGranted": list(self.items_granted),
        }
        if self.level is not None:
            result["level"] = self.level
            result["hitPoints"] = self.hit_points
        return result
