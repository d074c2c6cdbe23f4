"""Menu item entity and its recipe references."""

from dataclasses import dataclass, field, replace
from typing import Mapping

from src.common.exceptions.custom_exceptions import ValidationError
from src.common.result import Result, err, ok

from .ingredient import Ingredient


@dataclass(frozen=True)  # Value objects are immutable
class IngredientReference:
    """Quantity of one ingredient needed for a single serving."""

    ingredient_id: str
    quantity: float
    unit: str


@dataclass(frozen=True)
class MenuItem:
    """A sellable dish. The core only reads it, apart from cost recomputation."""

    id: str
    name: str
    description: str
    price: float
    category_id: str
    ingredient_references: tuple[IngredientReference, ...] = field(default_factory=tuple)
    preparation_time: int = 15  # minutes
    is_active: bool = True
    cost_price: float | None = None
    profit_margin: float | None = None

    @classmethod
    def create(
        cls,
        id: str,
        name: str,
        description: str,
        price: float,
        category_id: str,
        ingredient_references: list[IngredientReference],
        preparation_time: int,
        is_active: bool = True,
        cost_price: float | None = None,
        profit_margin: float | None = None,
    ) -> Result["MenuItem"]:
        if not name or not name.strip():
            return err(ValidationError("Menu item name is required"))
        if price <= 0:
            return err(ValidationError("Price must be positive"))
        if not category_id:
            return err(ValidationError("Category ID is required"))
        if preparation_time <= 0:
            return err(ValidationError("Preparation time must be positive"))

        for ref in ingredient_references:
            if not ref.ingredient_id:
                return err(ValidationError("Ingredient ID is required in references"))
            if ref.quantity <= 0:
                return err(ValidationError("Ingredient quantity must be positive"))
            if not ref.unit or not ref.unit.strip():
                return err(ValidationError("Ingredient unit is required"))

        return ok(
            cls(
                id=id,
                name=name.strip(),
                description=(description or "").strip(),
                price=price,
                category_id=category_id,
                ingredient_references=tuple(ingredient_references),
                preparation_time=preparation_time,
                is_active=is_active,
                cost_price=cost_price,
                profit_margin=profit_margin,
            )
        )

    def get_required_ingredients(self) -> tuple[IngredientReference, ...]:
        return self.ingredient_references

    def calculate_total_cost(self, ingredients: Mapping[str, Ingredient]) -> float:
        """Cost of one serving; references to unknown ingredients are ignored."""
        total_cost = 0.0
        for ref in self.ingredient_references:
            ingredient = ingredients.get(ref.ingredient_id)
            if ingredient:
                total_cost += ingredient.calculate_cost(ref.quantity)
        return total_cost

    def with_costing(self, ingredients: Mapping[str, Ingredient]) -> "MenuItem":
        """Returns a copy with cost price and profit margin (percent) recomputed."""
        if not self.ingredient_references:
            return self
        cost_price = round(self.calculate_total_cost(ingredients), 2)
        profit_margin = round((self.price - cost_price) / self.price * 100, 2)
        return replace(self, cost_price=cost_price, profit_margin=profit_margin)
