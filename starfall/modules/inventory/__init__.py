from starfall.modules.inventory.service import InventoryService

__all__ = ["InventoryService"]
