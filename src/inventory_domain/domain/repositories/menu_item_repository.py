# src/inventory_domain/domain/repositories/menu_item_repository.py
"""Menu item repository interface."""
from abc import ABC, abstractmethod
from typing import Optional

from src.common.result import Result
from src.inventory_domain.domain.entities.menu_item import MenuItem


class IMenuItemRepository(ABC):

    @abstractmethod
    async def find_by_id(self, menu_item_id: str) -> Result[Optional[MenuItem]]:
        """Retrieves a menu item by id; succeeds with None when it does not exist."""
        pass

    @abstractmethod
    async def find_by_ids(self, menu_item_ids: list[str]) -> Result[list[MenuItem]]:
        pass

    @abstractmethod
    async def find_all_active(self) -> Result[list[MenuItem]]:
        pass

    @abstractmethod
    async def save(self, menu_item: MenuItem) -> Result[MenuItem]:
        """Inserts or updates a menu item together with its recipe."""
        pass
