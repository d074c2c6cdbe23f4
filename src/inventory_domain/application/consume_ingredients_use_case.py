# src/inventory_domain/application/consume_ingredients_use_case.py
"""Use case translating one menu-item sale into ingredient stock deductions."""

import logging

from src.common.dtos.inventory_dtos import (
    ConsumptionResponseDTO,
    ConsumptionResultDTO,
    OrderItemDTO,
)
from src.common.exceptions.custom_exceptions import (
    ApplicationError,
    InactiveEntityError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    UnitMismatchWarning,
    ValidationError,
)
from src.common.result import Result, err, ok
from src.inventory_domain.domain.entities.ingredient import Ingredient
from src.inventory_domain.domain.repositories.ingredient_repository import IIngredientRepository
from src.inventory_domain.domain.repositories.menu_item_repository import IMenuItemRepository

logger = logging.getLogger(__name__)


class ConsumeIngredientsUseCase:
    """
    Deducts the ingredients of ``quantity`` servings of a menu item.

    Every check (quantity, menu item, ingredients, stock sufficiency) runs before the
    first write, so a rejected call has no side effects. Writes are per-ingredient
    compare-and-swap operations; if one fails, the writes already committed by this
    call are restored before the failure is returned.
    """

    def __init__(self, menu_item_repo: IMenuItemRepository, ingredient_repo: IIngredientRepository) -> None:
        self.menu_item_repo = menu_item_repo
        self.ingredient_repo = ingredient_repo

    async def execute(self, request: OrderItemDTO) -> Result[ConsumptionResponseDTO]:
        try:
            return await self._consume(request)
        except Exception as e:
            logger.exception(f"Unexpected error consuming ingredients for menu item {request.menu_item_id}")
            return err(ApplicationError(f"Failed to consume ingredients: {e}", original_exception=e))

    async def _consume(self, request: OrderItemDTO) -> Result[ConsumptionResponseDTO]:
        if request.quantity <= 0:
            return err(ValidationError("Quantity must be positive"))

        menu_item_result = await self.menu_item_repo.find_by_id(request.menu_item_id)
        if not menu_item_result.success:
            return menu_item_result

        menu_item = menu_item_result.value
        if menu_item is None:
            return err(NotFoundError("Menu item not found"))
        if not menu_item.is_active:
            return err(InactiveEntityError("Menu item is not available"))

        references = menu_item.get_required_ingredients()
        ingredient_ids = list(dict.fromkeys(ref.ingredient_id for ref in references))

        ingredients_result = await self.ingredient_repo.find_by_ids(ingredient_ids)
        if not ingredients_result.success:
            return ingredients_result

        ingredient_map: dict[str, Ingredient] = {ing.id: ing for ing in ingredients_result.value}

        warnings: list[str] = []
        for ref in references:
            ingredient = ingredient_map.get(ref.ingredient_id)
            if ingredient is None:
                return err(NotFoundError(f"Ingredient {ref.ingredient_id} not found"))
            if not ingredient.is_active:
                return err(InactiveEntityError(f"Ingredient {ingredient.name} is not active"))
            if ref.unit != ingredient.unit:
                warning = UnitMismatchWarning(ingredient.name, ref.unit, ingredient.unit)
                logger.warning(str(warning))
                warnings.append(str(warning))

        # Summed so a recipe listing the same ingredient twice is deducted once, in full.
        required: dict[str, float] = {}
        for ref in references:
            required[ref.ingredient_id] = required.get(ref.ingredient_id, 0) + ref.quantity * request.quantity

        for ingredient_id, quantity in required.items():
            ingredient = ingredient_map[ingredient_id]
            if quantity > ingredient.current_stock:
                return err(
                    InsufficientStockError(
                        ingredient.name, ingredient.current_stock, quantity, ingredient.unit, ingredient.id
                    )
                )

        original_stock = {ingredient_id: ingredient_map[ingredient_id].current_stock for ingredient_id in required}
        for ingredient_id, quantity in required.items():
            consume_result = ingredient_map[ingredient_id].consume(quantity)
            if not consume_result.success:
                return consume_result

        persist_result = await self._persist(required, ingredient_map, original_stock)
        if not persist_result.success:
            return persist_result

        consumption_results = [
            ConsumptionResultDTO(
                ingredient_id=ingredient_id,
                consumed_quantity=quantity,
                remaining_stock=ingredient_map[ingredient_id].current_stock,
                is_low_stock=ingredient_map[ingredient_id].is_low_stock(),
                needs_reorder=ingredient_map[ingredient_id].needs_reorder(),
            )
            for ingredient_id, quantity in required.items()
        ]

        total_cost = 0.0
        for ref in references:
            total_cost += ingredient_map[ref.ingredient_id].calculate_cost(ref.quantity * request.quantity)

        logger.info(
            f"Consumed ingredients for {request.quantity} x {menu_item.name} "
            f"({len(consumption_results)} ingredients, cost {total_cost:.2f})"
        )
        return ok(
            ConsumptionResponseDTO(
                menu_item_name=menu_item.name,
                total_cost=total_cost,
                consumption_results=consumption_results,
                warnings=warnings,
            )
        )

    async def _persist(
        self,
        required: dict[str, float],
        ingredient_map: dict[str, Ingredient],
        original_stock: dict[str, float],
    ) -> Result[None]:
        committed: list[str] = []
        for ingredient_id in required:
            new_stock = ingredient_map[ingredient_id].current_stock
            write_result = await self.ingredient_repo.compare_and_set_stock(
                ingredient_id, original_stock[ingredient_id], new_stock
            )
            if not write_result.success:
                logger.error(f"Stock write failed for ingredient {ingredient_id}: {write_result.error}")
                await self._restore(committed, ingredient_map, original_stock)
                error = write_result.error
                if not isinstance(error, PersistenceError):
                    error = PersistenceError(f"Failed to save ingredient {ingredient_id}", original_exception=error)
                return err(error)
            committed.append(ingredient_id)
        return ok(None)

    async def _restore(
        self,
        committed: list[str],
        ingredient_map: dict[str, Ingredient],
        original_stock: dict[str, float],
    ) -> None:
        for ingredient_id in reversed(committed):
            restore_result = await self.ingredient_repo.compare_and_set_stock(
                ingredient_id, ingredient_map[ingredient_id].current_stock, original_stock[ingredient_id]
            )
            if restore_result.success:
                logger.warning(f"Restored stock of ingredient {ingredient_id} to {original_stock[ingredient_id]}")
            else:
                logger.error(
                    f"Could not restore stock of ingredient {ingredient_id} to {original_stock[ingredient_id]}: "
                    f"{restore_result.error}. Manual reconciliation required."
                )
