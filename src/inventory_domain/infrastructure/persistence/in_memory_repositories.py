# src/inventory_domain/infrastructure/persistence/in_memory_repositories.py
"""In-process repository implementations for tests, demos and single-node setups without MySQL."""

import copy
import logging
from typing import Iterable, Optional

from src.common.exceptions.custom_exceptions import ConcurrentModificationError, NotFoundError
from src.common.result import Result, err, ok
from src.common.utils.date_utils import utc_now
from src.inventory_domain.domain.entities.ingredient import Ingredient
from src.inventory_domain.domain.entities.low_stock_notification import LowStockNotification
from src.inventory_domain.domain.entities.menu_item import MenuItem
from src.inventory_domain.domain.repositories.ingredient_repository import IIngredientRepository
from src.inventory_domain.domain.repositories.low_stock_notification_repository import (
    ILowStockNotificationRepository,
)
from src.inventory_domain.domain.repositories.menu_item_repository import IMenuItemRepository

logger = logging.getLogger(__name__)


class InMemoryIngredientRepository(IIngredientRepository):
    """Stores copies so callers can never mutate stored state without going through the repository."""

    def __init__(self, ingredients: Iterable[Ingredient] = ()) -> None:
        self._items: dict[str, Ingredient] = {ing.id: copy.deepcopy(ing) for ing in ingredients}

    async def find_by_id(self, ingredient_id: str) -> Result[Optional[Ingredient]]:
        ingredient = self._items.get(ingredient_id)
        return ok(copy.deepcopy(ingredient) if ingredient else None)

    async def find_by_ids(self, ingredient_ids: list[str]) -> Result[list[Ingredient]]:
        return ok([copy.deepcopy(self._items[i]) for i in dict.fromkeys(ingredient_ids) if i in self._items])

    async def find_all(self) -> Result[list[Ingredient]]:
        return ok([copy.deepcopy(ing) for ing in self._items.values() if ing.is_active])

    async def save(self, ingredient: Ingredient) -> Result[Ingredient]:
        self._items[ingredient.id] = copy.deepcopy(ingredient)
        return ok(copy.deepcopy(ingredient))

    async def find_low_stock_ingredients(self) -> Result[list[Ingredient]]:
        return ok([copy.deepcopy(ing) for ing in self._items.values() if ing.is_active and ing.needs_reorder()])

    async def compare_and_set_stock(
        self, ingredient_id: str, expected_stock: float, new_stock: float
    ) -> Result[Ingredient]:
        stored = self._items.get(ingredient_id)
        if stored is None:
            return err(NotFoundError(f"Ingredient {ingredient_id} not found"))
        if stored.current_stock != expected_stock:
            return err(ConcurrentModificationError(ingredient_id, expected_stock, stored.current_stock))

        set_result = stored.set_stock(new_stock)
        if not set_result.success:
            return set_result
        if new_stock < expected_stock:
            stored.last_consumed = utc_now()
        elif new_stock > expected_stock:
            stored.last_restocked = utc_now()
        return ok(copy.deepcopy(stored))


class InMemoryMenuItemRepository(IMenuItemRepository):
    def __init__(self, menu_items: Iterable[MenuItem] = ()) -> None:
        self._items: dict[str, MenuItem] = {item.id: item for item in menu_items}

    async def find_by_id(self, menu_item_id: str) -> Result[Optional[MenuItem]]:
        return ok(self._items.get(menu_item_id))

    async def find_by_ids(self, menu_item_ids: list[str]) -> Result[list[MenuItem]]:
        return ok([self._items[i] for i in dict.fromkeys(menu_item_ids) if i in self._items])

    async def find_all_active(self) -> Result[list[MenuItem]]:
        return ok([item for item in self._items.values() if item.is_active])

    async def save(self, menu_item: MenuItem) -> Result[MenuItem]:
        # MenuItem is frozen, so storing the instance itself is safe.
        self._items[menu_item.id] = menu_item
        return ok(menu_item)


class InMemoryLowStockNotificationRepository(ILowStockNotificationRepository):
    def __init__(self) -> None:
        self._items: dict[str, LowStockNotification] = {}

    async def create(self, notification: LowStockNotification) -> Result[LowStockNotification]:
        self._items[notification.id] = notification
        logger.debug(f"Created notification {notification.id} for {notification.ingredient_name}")
        return ok(notification)

    async def find_unacknowledged(self) -> Result[list[LowStockNotification]]:
        return ok([n for n in self._items.values() if not n.acknowledged])

    async def find_by_ingredient_id(self, ingredient_id: str) -> Result[Optional[LowStockNotification]]:
        for notification in self._items.values():
            if notification.ingredient_id == ingredient_id and not notification.acknowledged:
                return ok(notification)
        return ok(None)

    async def acknowledge(self, notification_id: str, user_id: str) -> Result[LowStockNotification]:
        notification = self._items.get(notification_id)
        if notification is None:
            return err(NotFoundError("Notification not found"))
        acknowledged = notification.acknowledge(user_id)
        self._items[notification_id] = acknowledged
        return ok(acknowledged)

    def all(self) -> list[LowStockNotification]:
        return list(self._items.values())
