# src/inventory_domain/domain/repositories/low_stock_notification_repository.py
"""Low-stock notification repository interface."""
from abc import ABC, abstractmethod
from typing import Optional

from src.common.result import Result
from src.inventory_domain.domain.entities.low_stock_notification import LowStockNotification


class ILowStockNotificationRepository(ABC):

    @abstractmethod
    async def create(self, notification: LowStockNotification) -> Result[LowStockNotification]:
        pass

    @abstractmethod
    async def find_unacknowledged(self) -> Result[list[LowStockNotification]]:
        pass

    @abstractmethod
    async def find_by_ingredient_id(self, ingredient_id: str) -> Result[Optional[LowStockNotification]]:
        """Retrieves the unacknowledged notification for an ingredient, if any."""
        pass

    @abstractmethod
    async def acknowledge(self, notification_id: str, user_id: str) -> Result[LowStockNotification]:
        pass
