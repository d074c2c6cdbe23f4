# src/inventory_domain/infrastructure/persistence/mysql_ingredient_repository.py
"""MySQL implementation of the ingredient repository."""

import logging
from typing import Optional

from mysql.connector import Error

from src.common.exceptions.custom_exceptions import (
    ConcurrentModificationError,
    NotFoundError,
    PersistenceError,
)
from src.common.result import Result
from src.common.utils.date_utils import format_datetime_for_db, parse_datetime_from_db, utc_now
from src.inventory_domain.domain.entities.ingredient import Ingredient
from src.inventory_domain.domain.repositories.ingredient_repository import IIngredientRepository
from src.inventory_domain.infrastructure.persistence.mysql_base import MySQLRepositoryBase, to_stock

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, name, description, unit, current_stock, min_stock, reorder_point, cost_per_unit, "
    "supplier_id, category, shelf_life, is_active, last_restocked, last_consumed"
)


class MySQLIngredientRepository(MySQLRepositoryBase, IIngredientRepository):
    """MySQL implementation of the Ingredient Repository."""

    def create_tables(self) -> None:
        """Creates the ingredient table with the 'rms_' prefix."""
        create_ingredients_table_query = """
        CREATE TABLE IF NOT EXISTS rms_ingredients (
            id VARCHAR(64) PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            description TEXT,
            unit VARCHAR(32) NOT NULL,
            current_stock DECIMAL(14, 3) NOT NULL DEFAULT 0,
            min_stock DECIMAL(14, 3) NOT NULL DEFAULT 0,
            reorder_point DECIMAL(14, 3) NOT NULL DEFAULT 0,
            cost_per_unit DECIMAL(12, 4) NOT NULL,
            supplier_id VARCHAR(64) NOT NULL,
            category VARCHAR(128),
            shelf_life INT UNSIGNED,
            is_active TINYINT(1) NOT NULL DEFAULT 1,
            last_restocked DATETIME,
            last_consumed DATETIME,
            date_updated DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            CONSTRAINT chk_stock_non_negative CHECK (current_stock >= 0),
            CONSTRAINT chk_reorder_point CHECK (reorder_point >= min_stock),
            INDEX idx_active_reorder (is_active, current_stock, reorder_point)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        self._execute_ddl([create_ingredients_table_query], "RMS ingredient")

    @staticmethod
    def _row_to_ingredient(row: dict) -> Optional[Ingredient]:
        result = Ingredient.create(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            unit=row["unit"],
            current_stock=to_stock(row["current_stock"]),
            min_stock=to_stock(row["min_stock"]),
            reorder_point=to_stock(row["reorder_point"]),
            cost_per_unit=float(row["cost_per_unit"]),
            supplier_id=row["supplier_id"],
            category=row["category"] or "",
            shelf_life=row["shelf_life"],
            is_active=bool(row["is_active"]),
            last_restocked=parse_datetime_from_db(row["last_restocked"]),
            last_consumed=parse_datetime_from_db(row["last_consumed"]),
        )
        if not result.success:
            logger.warning(f"Skipping invalid ingredient row {row.get('id')}: {result.error}")
            return None
        return result.value

    def _select(self, where: str, params: tuple, error_message: str) -> list[Ingredient]:
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(f"SELECT {_COLUMNS} FROM rms_ingredients WHERE {where}", params)
            rows = cursor.fetchall()
            # Ends the read snapshot so the next query sees fresh stock.
            conn.commit()
        except Error as e:
            raise PersistenceError(f"{error_message}: {e}", original_exception=e)
        finally:
            cursor.close()
        return [ingredient for ingredient in map(self._row_to_ingredient, rows) if ingredient is not None]

    def _find_by_id(self, ingredient_id: str) -> Optional[Ingredient]:
        found = self._select("id = %s", (ingredient_id,), f"Error fetching ingredient {ingredient_id}")
        return found[0] if found else None

    def _find_by_ids(self, ingredient_ids: list[str]) -> list[Ingredient]:
        if not ingredient_ids:
            return []
        placeholders = ",".join(["%s"] * len(ingredient_ids))
        return self._select(f"id IN ({placeholders})", tuple(ingredient_ids), "Error fetching ingredients")

    def _save(self, ingredient: Ingredient) -> Ingredient:
        conn = self._get_connection()
        cursor = conn.cursor()

        upsert_query = f"""
        INSERT INTO rms_ingredients ({_COLUMNS})
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        ON DUPLICATE KEY UPDATE
        name = VALUES(name),
        description = VALUES(description),
        unit = VALUES(unit),
        current_stock = VALUES(current_stock),
        min_stock = VALUES(min_stock),
        reorder_point = VALUES(reorder_point),
        cost_per_unit = VALUES(cost_per_unit),
        supplier_id = VALUES(supplier_id),
        category = VALUES(category),
        shelf_life = VALUES(shelf_life),
        is_active = VALUES(is_active),
        last_restocked = VALUES(last_restocked),
        last_consumed = VALUES(last_consumed)
        """
        params = (
            ingredient.id,
            ingredient.name,
            ingredient.description,
            ingredient.unit,
            to_stock(ingredient.current_stock),
            to_stock(ingredient.min_stock),
            to_stock(ingredient.reorder_point),
            ingredient.cost_per_unit,
            ingredient.supplier_id,
            ingredient.category,
            ingredient.shelf_life,
            int(ingredient.is_active),
            format_datetime_for_db(ingredient.last_restocked),
            format_datetime_for_db(ingredient.last_consumed),
        )

        try:
            cursor.execute(upsert_query, params)
            conn.commit()
        except Error as e:
            conn.rollback()
            raise PersistenceError(f"Error saving ingredient {ingredient.id}: {e}", original_exception=e)
        finally:
            cursor.close()
        return ingredient

    def _compare_and_set_stock(self, ingredient_id: str, expected_stock: float, new_stock: float) -> Ingredient:
        expected = to_stock(expected_stock)
        new = to_stock(new_stock)
        if new < 0:
            raise PersistenceError(f"Refusing to store negative stock for ingredient {ingredient_id}")

        touched_column = "last_consumed" if new < expected else "last_restocked"
        update_query = f"""
        UPDATE rms_ingredients
        SET current_stock = %s, {touched_column} = %s
        WHERE id = %s AND current_stock = %s
        """

        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(update_query, (new, format_datetime_for_db(utc_now()), ingredient_id, expected))
            matched = cursor.rowcount
            # Read back before committing: either the write and the returned row commit together, or nothing does.
            cursor.execute(f"SELECT {_COLUMNS} FROM rms_ingredients WHERE id = %s", (ingredient_id,))
            rows = cursor.fetchall()
            current = self._row_to_ingredient(rows[0]) if rows else None
            if matched and current is None:
                conn.rollback()
                raise PersistenceError(f"Stock update of ingredient {ingredient_id} produced an unreadable row")
            conn.commit()
        except Error as e:
            conn.rollback()
            raise PersistenceError(f"Error updating stock of ingredient {ingredient_id}: {e}", original_exception=e)
        finally:
            cursor.close()

        if not rows:
            raise NotFoundError(f"Ingredient {ingredient_id} not found")
        if matched == 0:
            raise ConcurrentModificationError(ingredient_id, expected, to_stock(rows[0]["current_stock"]))
        return current

    async def find_by_id(self, ingredient_id: str) -> Result[Optional[Ingredient]]:
        return await self._run(self._find_by_id, ingredient_id)

    async def find_by_ids(self, ingredient_ids: list[str]) -> Result[list[Ingredient]]:
        return await self._run(self._find_by_ids, list(dict.fromkeys(ingredient_ids)))

    async def find_all(self) -> Result[list[Ingredient]]:
        return await self._run(self._select, "is_active = 1", (), "Error fetching ingredients")

    async def save(self, ingredient: Ingredient) -> Result[Ingredient]:
        return await self._run(self._save, ingredient)

    async def find_low_stock_ingredients(self) -> Result[list[Ingredient]]:
        return await self._run(
            self._select, "is_active = 1 AND current_stock <= reorder_point", (), "Error fetching low stock ingredients"
        )

    async def compare_and_set_stock(
        self, ingredient_id: str, expected_stock: float, new_stock: float
    ) -> Result[Ingredient]:
        return await self._run(self._compare_and_set_stock, ingredient_id, expected_stock, new_stock)
