"""Custom application-wide exceptions.

Domain and use-case code does not raise these for business-rule violations;
they travel as the error half of a ``Result``.
"""

from dataclasses import dataclass


class ApplicationError(Exception):
    """Base class for application-specific errors."""

    def __init__(
        self, message: str = "An application error occurred", original_exception: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_exception = original_exception
        self.message = message

    def __str__(self) -> str:
        if self.original_exception:
            return f"{self.message} (Original error: {self.original_exception})"
        return self.message


class ValidationError(ApplicationError):
    """Raised for non-positive quantities, malformed references and broken entity invariants."""

    def __init__(self, message: str = "Validation failed", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)


class NotFoundError(ApplicationError):
    """A menu item, ingredient or notification does not exist."""

    def __init__(self, message: str = "Entity not found", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)


class InactiveEntityError(ApplicationError):
    """A menu item or ingredient has been deactivated."""

    def __init__(self, message: str = "Entity is not active", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)


class InsufficientStockError(ApplicationError):
    """Requested quantity exceeds the available stock of an ingredient."""

    def __init__(
        self,
        ingredient_name: str,
        available: float,
        required: float,
        unit: str = "",
        ingredient_id: str | None = None,
    ) -> None:
        self.ingredient_id = ingredient_id
        self.ingredient_name = ingredient_name
        self.available = available
        self.required = required
        self.unit = unit
        super().__init__(
            f"Insufficient stock for {ingredient_name}. Available: {available}{unit}, Required: {required}{unit}"
        )


class PersistenceError(ApplicationError):
    """Exception raised for errors during repository operations."""

    def __init__(self, message: str = "Database operation failed", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)
        self.message = f"Database Error: {message}"


class ConcurrentModificationError(PersistenceError):
    """A compare-and-swap stock write found a different stock value than expected."""

    def __init__(self, ingredient_id: str, expected_stock: float, actual_stock: float | None = None) -> None:
        self.ingredient_id = ingredient_id
        self.expected_stock = expected_stock
        self.actual_stock = actual_stock
        super().__init__(
            f"Stock of ingredient {ingredient_id} changed concurrently "
            f"(expected {expected_stock}, found {actual_stock})"
        )


class NotificationDeliveryError(ApplicationError):
    """Exception raised when an alert email cannot be delivered."""

    def __init__(
        self,
        message: str = "Notification delivery failed",
        original_exception: Exception | None = None,
        recipient: str | None = None,
    ) -> None:
        super().__init__(message, original_exception)
        self.recipient = recipient
        self.message = f"Delivery Error: {message}"
        if recipient:
            self.message += f" (Recipient: {recipient})"


@dataclass(frozen=True)
class UnitMismatchWarning:
    """Non-fatal: a recipe reference and its ingredient use different units."""

    ingredient_name: str
    reference_unit: str
    ingredient_unit: str

    def __str__(self) -> str:
        return (
            f"Unit mismatch for {self.ingredient_name}: "
            f"Menu item uses {self.reference_unit}, ingredient uses {self.ingredient_unit}"
        )
