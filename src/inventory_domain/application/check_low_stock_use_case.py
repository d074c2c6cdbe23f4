# src/inventory_domain/application/check_low_stock_use_case.py
"""Use case auditing stock levels and creating low-stock notifications."""

import logging
import uuid

from src.common.dtos.inventory_dtos import LowStockCheckResultDTO, LowStockIngredientDTO
from src.common.exceptions.custom_exceptions import ApplicationError
from src.common.result import Result, err, ok
from src.inventory_domain.domain.entities.low_stock_notification import LowStockNotificationFactory
from src.inventory_domain.domain.repositories.ingredient_repository import IIngredientRepository
from src.inventory_domain.domain.repositories.low_stock_notification_repository import (
    ILowStockNotificationRepository,
)

logger = logging.getLogger(__name__)


class CheckLowStockUseCase:
    """
    Scans ingredients at or below their reorder point and creates a notification for
    each one that has no unacknowledged notification yet, so repeated audits never
    stack up duplicate alerts for the same ingredient.
    """

    def __init__(
        self,
        ingredient_repo: IIngredientRepository,
        notification_repo: ILowStockNotificationRepository,
    ) -> None:
        self.ingredient_repo = ingredient_repo
        self.notification_repo = notification_repo

    async def execute(self) -> Result[LowStockCheckResultDTO]:
        try:
            return await self._check()
        except Exception as e:
            logger.exception("Unexpected error during low stock check")
            return err(ApplicationError(f"Failed to check low stock: {e}", original_exception=e))

    async def _check(self) -> Result[LowStockCheckResultDTO]:
        low_stock_result = await self.ingredient_repo.find_low_stock_ingredients()
        if not low_stock_result.success:
            return low_stock_result

        low_stock_ingredients = low_stock_result.value
        notifications_created = 0

        for ingredient in low_stock_ingredients:
            existing = await self.notification_repo.find_by_ingredient_id(ingredient.id)
            if not existing.success:
                logger.warning(f"Skipping {ingredient.name}: notification lookup failed ({existing.error})")
                continue

            if existing.value is not None:
                continue

            notification_result = LowStockNotificationFactory.create(
                str(uuid.uuid4()),
                ingredient.id,
                ingredient.name,
                ingredient.current_stock,
                ingredient.min_stock,
            )
            if not notification_result.success:
                logger.warning(f"Invalid notification for {ingredient.name}: {notification_result.error}")
                continue

            save_result = await self.notification_repo.create(notification_result.value)
            if save_result.success:
                notifications_created += 1
            else:
                logger.error(f"Failed to store notification for {ingredient.name}: {save_result.error}")

        logger.info(
            f"Low stock check: {len(low_stock_ingredients)} ingredients at or below reorder point, "
            f"{notifications_created} new notifications."
        )
        return ok(
            LowStockCheckResultDTO(
                low_stock_ingredients=[
                    LowStockIngredientDTO(
                        id=ingredient.id,
                        name=ingredient.name,
                        current_stock=ingredient.current_stock,
                        min_stock=ingredient.min_stock,
                        reorder_point=ingredient.reorder_point,
                        unit=ingredient.unit,
                    )
                    for ingredient in low_stock_ingredients
                ],
                notifications_created=notifications_created,
            )
        )
