"""Two-variant outcome type returned by entities, repositories and use cases."""

from dataclasses import dataclass
from typing import Generic, TypeVar

from src.common.exceptions.custom_exceptions import ApplicationError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a success carrying ``value`` or a failure carrying ``error``."""

    success: bool
    value: T | None = None
    error: ApplicationError | None = None

    @classmethod
    def ok(cls, value: T = None) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: ApplicationError) -> "Result[T]":
        if error is None:
            raise ValueError("A failed Result needs an error.")
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Returns the value or raises the carried error."""
        if not self.success:
            raise self.error
        return self.value


def ok(value: T = None) -> Result[T]:
    return Result.ok(value)


def err(error: ApplicationError) -> Result:
    return Result.fail(error)
