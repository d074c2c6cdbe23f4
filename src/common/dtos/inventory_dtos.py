"""Data Transfer Objects for inventory consumption and low-stock alerting."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class OrderItemDTO:
    """One line of an order: a menu item and the number of servings sold."""

    menu_item_id: str
    quantity: float


@dataclass
class ConsumptionResultDTO:
    """Outcome of deducting one ingredient. Never persisted."""

    ingredient_id: str
    consumed_quantity: float
    remaining_stock: float
    is_low_stock: bool
    needs_reorder: bool


@dataclass
class ConsumptionResponseDTO:
    menu_item_name: str
    total_cost: float
    consumption_results: list[ConsumptionResultDTO] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class FailedItemDTO:
    menu_item_id: str
    error: str


@dataclass
class OrderProcessingResultDTO:
    """Partial-failure outcome of a whole order."""

    successful: bool
    consumed_ingredients: list[ConsumptionResultDTO] = field(default_factory=list)
    failed_items: list[FailedItemDTO] = field(default_factory=list)


@dataclass
class LowStockIngredientDTO:
    id: str
    name: str
    current_stock: float
    min_stock: float
    reorder_point: float
    unit: str

    @property
    def is_critical(self) -> bool:
        return self.current_stock <= self.min_stock


@dataclass
class LowStockCheckResultDTO:
    low_stock_ingredients: list[LowStockIngredientDTO] = field(default_factory=list)
    notifications_created: int = 0


@dataclass
class AlertSummaryDTO:
    low_stock_count: int = 0
    critical_stock_count: int = 0
    emails_sent: int = 0
    notifications_created: int = 0


@dataclass(frozen=True)
class RealTimeAlertDTO:
    """Descriptor pushed onto the real-time alert queue when an order crosses a reorder point."""

    ingredient_id: str
    ingredient_name: str
    remaining_stock: float
    unit: str
    is_low_stock: bool
    created_at: datetime | None = None


@dataclass
class ItemAvailabilityDTO:
    menu_item_id: str
    menu_item_name: str
    available: bool
    missing_ingredients: list[str] = field(default_factory=list)


@dataclass
class DeductionPreviewDTO:
    """Projected stock of one ingredient if an order were consumed."""

    ingredient_id: str
    ingredient_name: str
    consumed_quantity: float
    current_stock: float
    remaining_stock: float
    unit: str
    is_low_stock: bool
    needs_reorder: bool
    reorder_point: float


@dataclass
class StockLevelDTO:
    id: str
    name: str
    current_stock: float
    min_stock: float
    reorder_point: float
    unit: str
    status: str  # NORMAL, LOW, CRITICAL
    cost_per_unit: float
    category: str


@dataclass
class StockSummaryDTO:
    total: int
    low_stock: int
    needs_reorder: int
    total_value: float


@dataclass
class StockLevelsResponseDTO:
    stock_levels: list[StockLevelDTO]
    summary: StockSummaryDTO


@dataclass
class StockUpdateDTO:
    ingredient_id: str
    new_stock: float


@dataclass
class StockUpdateResultDTO:
    ingredient_id: str
    success: bool
    error: str | None = None
