# src/inventory_domain/application/stock_service.py
"""Application service for manual stock maintenance and stock reporting."""

import logging

from src.common.dtos.inventory_dtos import (
    LowStockIngredientDTO,
    StockLevelDTO,
    StockLevelsResponseDTO,
    StockSummaryDTO,
    StockUpdateDTO,
    StockUpdateResultDTO,
)
from src.common.exceptions.custom_exceptions import ConcurrentModificationError, NotFoundError
from src.common.result import Result, err, ok
from src.inventory_domain.domain.entities.ingredient import Ingredient
from src.inventory_domain.domain.entities.low_stock_notification import LowStockNotification
from src.inventory_domain.domain.repositories.ingredient_repository import IIngredientRepository
from src.inventory_domain.domain.repositories.low_stock_notification_repository import (
    ILowStockNotificationRepository,
)
from src.inventory_domain.domain.repositories.menu_item_repository import IMenuItemRepository

logger = logging.getLogger(__name__)

REPLENISH_ATTEMPTS = 3


class StockApplicationService:
    """Stock corrections, restocking, reporting and menu cost recomputation."""

    def __init__(
        self,
        ingredient_repo: IIngredientRepository,
        menu_item_repo: IMenuItemRepository,
        notification_repo: ILowStockNotificationRepository,
    ) -> None:
        self.ingredient_repo = ingredient_repo
        self.menu_item_repo = menu_item_repo
        self.notification_repo = notification_repo

    async def get_stock_levels(self) -> Result[StockLevelsResponseDTO]:
        """Returns every active ingredient with its stock status and an inventory summary."""
        result = await self.ingredient_repo.find_all()
        if not result.success:
            return result

        ingredients = result.value
        stock_levels = [
            StockLevelDTO(
                id=ing.id,
                name=ing.name,
                current_stock=ing.current_stock,
                min_stock=ing.min_stock,
                reorder_point=ing.reorder_point,
                unit=ing.unit,
                status=ing.get_stock_level().value,
                cost_per_unit=ing.cost_per_unit,
                category=ing.category,
            )
            for ing in ingredients
        ]
        summary = StockSummaryDTO(
            total=len(ingredients),
            low_stock=sum(1 for ing in ingredients if ing.is_low_stock()),
            needs_reorder=sum(1 for ing in ingredients if ing.needs_reorder()),
            total_value=round(sum(ing.calculate_cost(ing.current_stock) for ing in ingredients), 2),
        )
        return ok(StockLevelsResponseDTO(stock_levels=stock_levels, summary=summary))

    async def get_low_stock_alerts(self) -> Result[list[LowStockIngredientDTO]]:
        result = await self.ingredient_repo.find_low_stock_ingredients()
        if not result.success:
            return result
        return ok(
            [
                LowStockIngredientDTO(
                    id=ing.id,
                    name=ing.name,
                    current_stock=ing.current_stock,
                    min_stock=ing.min_stock,
                    reorder_point=ing.reorder_point,
                    unit=ing.unit,
                )
                for ing in result.value
            ]
        )

    async def update_stock(self, ingredient_id: str, new_stock: float) -> Result[Ingredient]:
        """
        Overwrites the stock of one ingredient (manual correction).

        The write only lands if the stock is still the value that was read; otherwise a
        ConcurrentModificationError is returned and nothing changes.
        """
        ingredient_result = await self._load(ingredient_id)
        if not ingredient_result.success:
            return ingredient_result

        ingredient = ingredient_result.value
        loaded_stock = ingredient.current_stock
        set_result = ingredient.set_stock(new_stock)
        if not set_result.success:
            return set_result

        write_result = await self.ingredient_repo.compare_and_set_stock(ingredient_id, loaded_stock, new_stock)
        if write_result.success:
            logger.info(f"Stock of {write_result.value.name} set to {new_stock}{write_result.value.unit}")
        else:
            logger.warning(f"Stock update of ingredient {ingredient_id} failed: {write_result.error}")
        return write_result

    async def bulk_update_stock(self, updates: list[StockUpdateDTO]) -> list[StockUpdateResultDTO]:
        """Applies each update independently; one failing update does not stop the rest."""
        results: list[StockUpdateResultDTO] = []
        for update in updates:
            update_result = await self.update_stock(update.ingredient_id, update.new_stock)
            if update_result.success:
                results.append(StockUpdateResultDTO(ingredient_id=update.ingredient_id, success=True))
            else:
                results.append(
                    StockUpdateResultDTO(
                        ingredient_id=update.ingredient_id, success=False, error=update_result.error.message
                    )
                )

        failed = sum(1 for r in results if not r.success)
        logger.info(f"Bulk stock update: {len(results) - failed} succeeded, {failed} failed.")
        return results

    async def replenish(self, ingredient_id: str, quantity: float) -> Result[Ingredient]:
        """Adds stock; a concurrent stock change is retried against the fresh value."""
        write_result: Result[Ingredient] = err(NotFoundError("Ingredient not found"))
        for attempt in range(1, REPLENISH_ATTEMPTS + 1):
            ingredient_result = await self._load(ingredient_id)
            if not ingredient_result.success:
                return ingredient_result

            ingredient = ingredient_result.value
            loaded_stock = ingredient.current_stock
            replenish_result = ingredient.replenish(quantity)
            if not replenish_result.success:
                return replenish_result

            write_result = await self.ingredient_repo.compare_and_set_stock(
                ingredient_id, loaded_stock, replenish_result.value.current_stock
            )
            if write_result.success:
                logger.info(
                    f"Replenished {write_result.value.name} by {quantity}{write_result.value.unit} "
                    f"(now {write_result.value.current_stock}{write_result.value.unit})"
                )
                return write_result
            if not isinstance(write_result.error, ConcurrentModificationError):
                return write_result
            logger.warning(
                f"Stock of ingredient {ingredient_id} changed during replenishment "
                f"(attempt {attempt} of {REPLENISH_ATTEMPTS}), retrying"
            )

        logger.error(f"Giving up replenishing ingredient {ingredient_id}: {write_result.error}")
        return write_result

    async def acknowledge_notification(self, notification_id: str, user_id: str) -> Result[LowStockNotification]:
        result = await self.notification_repo.acknowledge(notification_id, user_id)
        if result.success:
            logger.info(f"Notification {notification_id} for {result.value.ingredient_name} acknowledged by {user_id}")
        return result

    async def recalculate_menu_costs(self) -> Result[int]:
        """Recomputes cost price and profit margin of every active menu item and saves the changed ones."""
        menu_result = await self.menu_item_repo.find_all_active()
        if not menu_result.success:
            return menu_result

        menu_items = menu_result.value
        ingredient_ids = list(
            dict.fromkeys(ref.ingredient_id for item in menu_items for ref in item.get_required_ingredients())
        )
        ingredients_result = await self.ingredient_repo.find_by_ids(ingredient_ids)
        if not ingredients_result.success:
            return ingredients_result
        ingredient_map = {ing.id: ing for ing in ingredients_result.value}

        updated = 0
        for menu_item in menu_items:
            costed = menu_item.with_costing(ingredient_map)
            if costed == menu_item:
                continue
            save_result = await self.menu_item_repo.save(costed)
            if not save_result.success:
                logger.error(f"Failed to save costing for {menu_item.name}: {save_result.error}")
                continue
            updated += 1

        logger.info(f"Recalculated costing for {updated} menu items.")
        return ok(updated)

    async def _load(self, ingredient_id: str) -> Result[Ingredient]:
        result = await self.ingredient_repo.find_by_id(ingredient_id)
        if not result.success:
            return result
        if result.value is None:
            return err(NotFoundError("Ingredient not found"))
        return result
