from starfall.modules.equipment.contracts import (
    EquipItemRequest,
    EquipItemResponse,
    EquipSlot,
)
from starfall.modules.equipment.service import EquipmentService

__all__ = ["EquipItemRequest", "EquipItemResponse", "EquipSlot", "EquipmentService"]
