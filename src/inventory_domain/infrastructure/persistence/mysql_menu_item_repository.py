# src/inventory_domain/infrastructure/persistence/mysql_menu_item_repository.py
"""MySQL implementation of the menu item repository."""

import logging
from typing import Optional

from mysql.connector import Error

from src.common.exceptions.custom_exceptions import PersistenceError
from src.common.result import Result
from src.inventory_domain.domain.entities.menu_item import IngredientReference, MenuItem
from src.inventory_domain.domain.repositories.menu_item_repository import IMenuItemRepository
from src.inventory_domain.infrastructure.persistence.mysql_base import MySQLRepositoryBase

logger = logging.getLogger(__name__)


class MySQLMenuItemRepository(MySQLRepositoryBase, IMenuItemRepository):
    """Menu items live in rms_menu_items, their recipes in rms_menu_item_ingredients."""

    def create_tables(self) -> None:
        create_menu_items_table_query = """
        CREATE TABLE IF NOT EXISTS rms_menu_items (
            id VARCHAR(64) PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            description TEXT,
            price DECIMAL(10, 2) NOT NULL,
            category_id VARCHAR(64) NOT NULL,
            preparation_time INT UNSIGNED NOT NULL DEFAULT 15,
            is_active TINYINT(1) NOT NULL DEFAULT 1,
            cost_price DECIMAL(10, 2),
            profit_margin DECIMAL(7, 2),
            date_updated DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            UNIQUE KEY uk_menu_item_name (name),
            INDEX idx_category_active (category_id, is_active)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        create_references_table_query = """
        CREATE TABLE IF NOT EXISTS rms_menu_item_ingredients (
            menu_item_id VARCHAR(64) NOT NULL,
            position SMALLINT UNSIGNED NOT NULL,
            ingredient_id VARCHAR(64) NOT NULL,
            quantity DECIMAL(14, 3) NOT NULL,
            unit VARCHAR(32) NOT NULL,
            PRIMARY KEY (menu_item_id, position),
            INDEX idx_ingredient (ingredient_id),
            CONSTRAINT fk_menu_item FOREIGN KEY (menu_item_id) REFERENCES rms_menu_items (id) ON DELETE CASCADE
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        self._execute_ddl([create_menu_items_table_query, create_references_table_query], "RMS menu item")

    def _load(self, where: str, params: tuple) -> list[MenuItem]:
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(
                "SELECT id, name, description, price, category_id, preparation_time, is_active, "
                f"cost_price, profit_margin FROM rms_menu_items WHERE {where}",
                params,
            )
            rows = cursor.fetchall()
            references: dict[str, list[IngredientReference]] = {row["id"]: [] for row in rows}
            if rows:
                placeholders = ",".join(["%s"] * len(references))
                cursor.execute(
                    "SELECT menu_item_id, ingredient_id, quantity, unit FROM rms_menu_item_ingredients "
                    f"WHERE menu_item_id IN ({placeholders}) ORDER BY menu_item_id, position",
                    tuple(references),
                )
                for ref_row in cursor.fetchall():
                    references[ref_row["menu_item_id"]].append(
                        IngredientReference(
                            ingredient_id=ref_row["ingredient_id"],
                            quantity=float(ref_row["quantity"]),
                            unit=ref_row["unit"],
                        )
                    )
            conn.commit()
        except Error as e:
            raise PersistenceError(f"Error fetching menu items: {e}", original_exception=e)
        finally:
            cursor.close()

        menu_items: list[MenuItem] = []
        for row in rows:
            result = MenuItem.create(
                id=row["id"],
                name=row["name"],
                description=row["description"] or "",
                price=float(row["price"]),
                category_id=row["category_id"],
                ingredient_references=references[row["id"]],
                preparation_time=row["preparation_time"],
                is_active=bool(row["is_active"]),
                cost_price=float(row["cost_price"]) if row["cost_price"] is not None else None,
                profit_margin=float(row["profit_margin"]) if row["profit_margin"] is not None else None,
            )
            if result.success:
                menu_items.append(result.value)
            else:
                logger.warning(f"Skipping invalid menu item row {row['id']}: {result.error}")
        return menu_items

    def _find_by_id(self, menu_item_id: str) -> Optional[MenuItem]:
        found = self._load("id = %s", (menu_item_id,))
        return found[0] if found else None

    def _find_by_ids(self, menu_item_ids: list[str]) -> list[MenuItem]:
        if not menu_item_ids:
            return []
        placeholders = ",".join(["%s"] * len(menu_item_ids))
        return self._load(f"id IN ({placeholders})", tuple(menu_item_ids))

    def _save(self, menu_item: MenuItem) -> MenuItem:
        conn = self._get_connection()
        cursor = conn.cursor()

        upsert_query = """
        INSERT INTO rms_menu_items
        (id, name, description, price, category_id, preparation_time, is_active, cost_price, profit_margin)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        ON DUPLICATE KEY UPDATE
        name = VALUES(name),
        description = VALUES(description),
        price = VALUES(price),
        category_id = VALUES(category_id),
        preparation_time = VALUES(preparation_time),
        is_active = VALUES(is_active),
        cost_price = VALUES(cost_price),
        profit_margin = VALUES(profit_margin)
        """
        insert_reference_query = """
        INSERT INTO rms_menu_item_ingredients (menu_item_id, position, ingredient_id, quantity, unit)
        VALUES (%s, %s, %s, %s, %s)
        """
        try:
            cursor.execute(
                upsert_query,
                (
                    menu_item.id,
                    menu_item.name,
                    menu_item.description,
                    menu_item.price,
                    menu_item.category_id,
                    menu_item.preparation_time,
                    int(menu_item.is_active),
                    menu_item.cost_price,
                    menu_item.profit_margin,
                ),
            )
            cursor.execute("DELETE FROM rms_menu_item_ingredients WHERE menu_item_id = %s", (menu_item.id,))
            if menu_item.ingredient_references:
                cursor.executemany(
                    insert_reference_query,
                    [
                        (menu_item.id, position, ref.ingredient_id, ref.quantity, ref.unit)
                        for position, ref in enumerate(menu_item.ingredient_references)
                    ],
                )
            conn.commit()
        except Error as e:
            conn.rollback()
            raise PersistenceError(f"Error saving menu item {menu_item.id}: {e}", original_exception=e)
        finally:
            cursor.close()
        return menu_item

    async def find_by_id(self, menu_item_id: str) -> Result[Optional[MenuItem]]:
        return await self._run(self._find_by_id, menu_item_id)

    async def find_by_ids(self, menu_item_ids: list[str]) -> Result[list[MenuItem]]:
        return await self._run(self._find_by_ids, list(dict.fromkeys(menu_item_ids)))

    async def find_all_active(self) -> Result[list[MenuItem]]:
        return await self._run(self._load, "is_active = 1", ())

    async def save(self, menu_item: MenuItem) -> Result[MenuItem]:
        return await self._run(self._save, menu_item)
