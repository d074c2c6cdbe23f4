"""Ingredient entity."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from src.common.exceptions.custom_exceptions import InsufficientStockError, ValidationError
from src.common.result import Result, err, ok
from src.common.utils.date_utils import utc_now


class StockLevel(str, Enum):
    NORMAL = "NORMAL"
    LOW = "LOW"
    CRITICAL = "CRITICAL"


@dataclass
class Ingredient:
    """An ingredient and its stock ledger.

    ``current_stock`` changes only through :meth:`consume`, :meth:`replenish` and
    :meth:`set_stock`, each of which keeps it non-negative. Ingredients are never
    deleted; they are deactivated with ``is_active = False``.
    """

    id: str
    name: str
    description: str
    unit: str
    current_stock: float
    min_stock: float
    reorder_point: float
    cost_per_unit: float
    supplier_id: str
    category: str
    shelf_life: int | None = None  # days
    is_active: bool = True
    last_restocked: datetime | None = None
    last_consumed: datetime | None = None

    def __post_init__(self) -> None:
        """Post-initialization for validation."""
        if not self.name or not self.name.strip():
            raise ValueError("Ingredient name is required")
        if not self.unit or not self.unit.strip():
            raise ValueError("Unit is required")
        if self.current_stock < 0:
            raise ValueError("Current stock cannot be negative")
        if self.min_stock < 0:
            raise ValueError("Minimum stock cannot be negative")
        if self.reorder_point < 0:
            raise ValueError("Reorder point cannot be negative")
        if self.reorder_point < self.min_stock:
            raise ValueError("Reorder point must be greater than or equal to minimum stock")
        if self.cost_per_unit <= 0:
            raise ValueError("Cost per unit must be positive")
        if not self.supplier_id:
            raise ValueError("Supplier ID is required")
        self.name = self.name.strip()
        self.unit = self.unit.strip()
        self.description = (self.description or "").strip()
        self.category = (self.category or "").strip()

    @classmethod
    def create(
        cls,
        id: str,
        name: str,
        description: str,
        unit: str,
        current_stock: float,
        min_stock: float,
        reorder_point: float,
        cost_per_unit: float,
        supplier_id: str,
        category: str,
        shelf_life: int | None = None,
        is_active: bool = True,
        last_restocked: datetime | None = None,
        last_consumed: datetime | None = None,
    ) -> Result["Ingredient"]:
        """Validating constructor; returns a failure instead of raising."""
        try:
            return ok(
                cls(
                    id=id,
                    name=name,
                    description=description,
                    unit=unit,
                    current_stock=current_stock,
                    min_stock=min_stock,
                    reorder_point=reorder_point,
                    cost_per_unit=cost_per_unit,
                    supplier_id=supplier_id,
                    category=category,
                    shelf_life=shelf_life,
                    is_active=is_active,
                    last_restocked=last_restocked,
                    last_consumed=last_consumed,
                )
            )
        except ValueError as e:
            return err(ValidationError(str(e)))

    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock

    def needs_reorder(self) -> bool:
        return self.current_stock <= self.reorder_point

    def get_stock_level(self) -> StockLevel:
        if self.is_low_stock():
            return StockLevel.CRITICAL
        if self.needs_reorder():
            return StockLevel.LOW
        return StockLevel.NORMAL

    def consume(self, quantity: float) -> Result["Ingredient"]:
        if quantity <= 0:
            return err(ValidationError("Consumption quantity must be positive"))
        if quantity > self.current_stock:
            return err(InsufficientStockError(self.name, self.current_stock, quantity, self.unit, self.id))

        self.current_stock -= quantity
        self.last_consumed = utc_now()
        return ok(self)

    def replenish(self, quantity: float) -> Result["Ingredient"]:
        if quantity <= 0:
            return err(ValidationError("Replenishment quantity must be positive"))

        self.current_stock += quantity
        self.last_restocked = utc_now()
        return ok(self)

    def set_stock(self, new_stock: float) -> Result["Ingredient"]:
        """Overwrites the stock, for manual corrections and bulk updates."""
        if new_stock < 0:
            return err(ValidationError("Stock cannot be negative"))

        self.current_stock = new_stock
        return ok(self)

    def calculate_cost(self, quantity: float) -> float:
        # Rounding is left to presentation.
        return self.cost_per_unit * quantity
