"""Request/response contracts for the `equipItem` handler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from starfall.domain.models.player import Equipment
from starfall.modules.shared.exceptions import ValidationError


@dataclass(frozen=True)
class EquipSlot:
    slot: str
    item: str

    @classmethod
    def from_payload(cls, payload: Any, field_name: str) -> "EquipSlot":
        if not isinstance(payload, Mapping):
            raise ValidationError(field_name, "must be an object with 'slot' and 'item'")
        slot = payload.get("slot")
        item = payload.get("item")
        if not isinstance(slot, str) or not slot:
            raise ValidationError(f"{field_name}.slot", "must be a non-empty string")
        if not isinstance(item, str) or not item:
            raise ValidationError(f"{field_name}.item", "must be a non-empty string")
        return cls(slot=slot, item=item)


@dataclass(frozen=True)
class EquipItemRequest:
    single: Optional[EquipSlot] = None
    multiple: Tuple[EquipSlot, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EquipItemRequest":
        single_raw = payload.get("single")
        multiple_raw = payload.get("multiple")

        single = EquipSlot.from_payload(single_raw, "single") if single_raw is not None else None

        multiple: Tuple[EquipSlot, ...] = ()
        if multiple_raw is not None:
            if not isinstance(multiple_raw, list):
                raise ValidationError("multiple", "must be a list of slot assignments")
            multiple = tuple(
                EquipSlot.from_payload(entry, f"multiple[{index}]")
                for index, entry in enumerate(multiple_raw)
            )

        if single is None and not multiple:
            raise ValidationError("equipment", "at least one slot assignment is required")

        return cls(single=single, multiple=multiple, raw=dict(payload))

    def assignments(self) -> Iterator[Tuple[str, str]]:
        """Slot assignments in application order: `single` first, then `multiple`."""
        if self.single is not None:
            yield self.single.slot, self.single.item
        for entry in self.multiple:
            yield entry.slot, entry.item


@dataclass(frozen=True)
class EquipItemResponse:
    data_version: int
    equipment: Equipment

    def to_dict(self) -> Dict[str, Any]:
        return {"dataVersion": self.data_version, "equipment": dict(self.equipment)}
