"""Response contracts for the `playerLogin` and `returnToHomeBase` handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from starfall.domain.models.base import Number
from starfall.domain.models.player import Equipment, Inventory


@dataclass(frozen=True)
class LoginResponse:
    did_grant_starting_pack: bool
    player_hp: Number
    equipment: Equipment = field(default_factory=dict)
    experience: Number = 0
    level: int = 1
    inventory: Inventory = field(default_factory=Inventory)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "didGrantStartingPack": self.did_grant_starting_pack,
            "playerHP": self.player_hp,
            "equipment": dict(self.equipment),
            "experience": self.experience,
            "level": self.level,
            "inventory": self.inventory.to_dict(),
        }


@dataclass(frozen=True)
class ReturnToBaseResponse:
    max_hp: Number

    def to_dict(self) -> Dict[str, Any]:
        return {"maxHP": self.max_hp}
