"""Low-stock notification entity and its factory."""

from dataclasses import dataclass, replace
from datetime import datetime

from src.common.exceptions.custom_exceptions import ValidationError
from src.common.result import Result, err, ok
from src.common.utils.date_utils import utc_now


@dataclass(frozen=True)
class LowStockNotification:
    """One low-stock event for one ingredient.

    At most one unacknowledged notification exists per ingredient at a time.
    """

    id: str
    ingredient_id: str
    ingredient_name: str
    current_stock: float
    min_stock: float
    notified_at: datetime
    acknowledged: bool = False
    acknowledged_by: str | None = None
    acknowledged_at: datetime | None = None

    def acknowledge(self, user_id: str, at: datetime | None = None) -> "LowStockNotification":
        return replace(self, acknowledged=True, acknowledged_by=user_id, acknowledged_at=at or utc_now())


class LowStockNotificationFactory:
    @staticmethod
    def create(
        id: str,
        ingredient_id: str,
        ingredient_name: str,
        current_stock: float,
        min_stock: float,
    ) -> Result[LowStockNotification]:
        if not ingredient_id:
            return err(ValidationError("Ingredient ID is required"))
        if not ingredient_name:
            return err(ValidationError("Ingredient name is required"))
        if current_stock < 0:
            return err(ValidationError("Current stock cannot be negative"))
        if min_stock < 0:
            return err(ValidationError("Minimum stock cannot be negative"))

        return ok(
            LowStockNotification(
                id=id,
                ingredient_id=ingredient_id,
                ingredient_name=ingredient_name,
                current_stock=current_stock,
                min_stock=min_stock,
                notified_at=utc_now(),
                acknowledged=False,
            )
        )
