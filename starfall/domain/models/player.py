"""
Player domain models for Starfall.

Purpose
-------
Typed, immutable snapshots of the parts of a player's record the engine
reads and writes: progression statistics, vitals, equipment, and inventory.

These are separate from the record service's wire format; the
`PlayerRecordRepository` converts between the two.

Responsibilities
----------------
- Enforce vitals invariants (current HP within [0, max HP])
- Apply equipment assignments with last-write-wins semantics
- Answer inventory questions (is it empty, what is a currency balance)

Non-Responsibilities
--------------------
- Persistence (handled by repositories)
- Level-up computation (handled by `starfall.modules.progression.leveling`)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from starfall.domain.models.base import (
    DomainValidationError,
    Number,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
)

# slot name -> item instance id
Equipment = Dict[str, str]


# ============================================================================
# PROGRESSION
# ============================================================================


@dataclass(frozen=True)
class PlayerStatistics:
    kills: int
    experience: Number
    level: int

    def __post_init__(self) -> None:
        validate_non_negative(self.kills, "kills")
        validate_non_negative(self.experience, "experience")
        validate_positive(self.level, "level")


@dataclass(frozen=True)
class PlayerVitals:
    """
    Current and maximum hit points.

    Invariant: 0 <= current_hp <= max_hp.
    """

    current_hp: Number
    max_hp: Number

    def __post_init__(self) -> None:
        validate_non_negative(self.current_hp, "current_hp")
        validate_non_negative(self.max_hp, "max_hp")
        if self.current_hp > self.max_hp:
            raise DomainValidationError(
                f"current_hp ({self.current_hp}) exceeds max_hp ({self.max_hp})",
                field="current_hp",
            )

    @classmethod
    def clamped(cls, current_hp: Number, max_hp: Number) -> "PlayerVitals":
        """Build vitals with `current_hp` clamped into [0, max_hp]."""
        return cls(current_hp=min(max(current_hp, 0), max_hp), max_hp=max_hp)

    @property
    def is_full(self) -> bool:
        return self.current_hp == self.max_hp

    def restored(self) -> "PlayerVitals":
        return replace(self, current_hp=self.max_hp)

    def with_bonus_max_hp(self, bonus: Number) -> "PlayerVitals":
        """Raise max HP by `bonus` and fully heal. Max HP never decreases."""
        validate_non_negative(bonus, "bonus")
        new_max = self.max_hp + bonus
        return PlayerVitals(current_hp=new_max, max_hp=new_max)


# ============================================================================
# EQUIPMENT
# ============================================================================


def apply_equipment(
    current: Optional[Mapping[str, str]],
    assignments: Iterable[Tuple[str, str]],
) -> Equipment:
    """
    Return a new equipment map with `assignments` applied in order.

    Later assignments to the same slot win; slots not mentioned keep
    their existing item.
    """
    merged: Equipment = dict(current or {})
    for slot, item_instance_id in assignments:
        validate_not_empty(slot, "slot")
        merged[slot] = item_instance_id
    return merged


# ============================================================================
# INVENTORY
# ============================================================================


@dataclass(frozen=True)
class ItemInstance:
    item_id: str
    item_instance_id: str
    item_class: Optional[str] = None
    remaining_uses: Optional[int] = None

    def has_class_containing(self, fragment: str) -> bool:
        return bool(self.item_class) and fragment in self.item_class

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ItemId": self.item_id,
            "ItemInstanceId": self.item_instance_id,
            "ItemClass": self.item_class,
            "RemainingUses": self.remaining_uses,
        }


@dataclass(frozen=True)
class Inventory:
    items: Tuple[ItemInstance, ...] = ()
    currency: Mapping[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    def currency_balance(self, code: str) -> int:
        """Balance for `code`; an absent currency counts as zero."""
        return int(self.currency.get(code, 0) or 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Inventory": [item.to_dict() for item in self.items],
            "VirtualCurrency": dict(self.currency),
        }
