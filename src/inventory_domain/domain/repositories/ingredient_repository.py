# src/inventory_domain/domain/repositories/ingredient_repository.py
"""Ingredient repository interface."""
from abc import ABC, abstractmethod
from typing import Optional

from src.common.result import Result
from src.inventory_domain.domain.entities.ingredient import Ingredient


class IIngredientRepository(ABC):

    @abstractmethod
    async def find_by_id(self, ingredient_id: str) -> Result[Optional[Ingredient]]:
        """Retrieves an ingredient by id; succeeds with None when it does not exist."""
        pass

    @abstractmethod
    async def find_by_ids(self, ingredient_ids: list[str]) -> Result[list[Ingredient]]:
        """Retrieves several ingredients in a single round trip. Missing ids are simply absent."""
        pass

    @abstractmethod
    async def find_all(self) -> Result[list[Ingredient]]:
        """Retrieves all active ingredients."""
        pass

    @abstractmethod
    async def save(self, ingredient: Ingredient) -> Result[Ingredient]:
        """Inserts or updates an ingredient."""
        pass

    @abstractmethod
    async def find_low_stock_ingredients(self) -> Result[list[Ingredient]]:
        """Retrieves active ingredients whose stock is at or below their reorder point."""
        pass

    @abstractmethod
    async def compare_and_set_stock(
        self, ingredient_id: str, expected_stock: float, new_stock: float
    ) -> Result[Ingredient]:
        """
        Atomically sets the stock only if it still equals ``expected_stock``.
        Fails with ConcurrentModificationError otherwise, NotFoundError if the ingredient is absent.
        """
        pass
